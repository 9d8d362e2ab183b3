"""
Provider registry: pick the adapter for a provider id.

Every adapter exposes ``parse_payload(payload, **options) -> SourceFragments``.
"""
from __future__ import annotations

from typing import Any, Callable, Dict

from . import cqu_api, hnvcc_html, wakeup_share
from .models import SourceFragments

ADAPTERS: Dict[str, Callable[..., SourceFragments]] = {
    "cqu": cqu_api.parse_payload,
    "wakeup": wakeup_share.parse_payload,
    "hnvcc": hnvcc_html.parse_payload,
}

PROVIDER_NAMES = {
    "cqu": "Chongqing University (my.cqu.edu.cn)",
    "wakeup": "WakeUp share key",
    "hnvcc": "Hunan Vocational College of Commerce (jwxt.hnvcc.edu.cn)",
}


def produce_fragments(provider: str, payload: Any, **options: Any) -> SourceFragments:
    try:
        adapter = ADAPTERS[provider]
    except KeyError:
        raise ValueError(
            f"Unknown provider: {provider!r}. Use one of: {', '.join(sorted(ADAPTERS))}."
        ) from None
    return adapter(payload, **options)
