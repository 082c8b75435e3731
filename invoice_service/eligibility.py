"""
eligibility.py — Reprocessing Eligibility Decisions

Decides, per order reference, whether the invoice pipeline should run for it.
The decision is a pure function of the reference and the configured policy.
"""

import logging
from typing import Union

from .models import OrderReference, ReprocessPolicy

log = logging.getLogger(__name__)


def parse_policy(raw: str) -> Union[ReprocessPolicy, str]:
    """
    Converts a configured policy name into a ReprocessPolicy.

    Unknown names are returned unchanged so that is_eligible() applies its
    fallback rule (and logs it) instead of failing at startup.
    """
    try:
        return ReprocessPolicy(raw.strip().upper())
    except ValueError:
        log.warning(f"Unknown reprocess policy configured: {raw!r}")
        return raw


def is_eligible(ref: OrderReference, policy: Union[ReprocessPolicy, str]) -> bool:
    """
    Returns True if the referenced order should be (re)processed.

    Args:
        ref (OrderReference): The parsed order reference.
        policy (ReprocessPolicy | str): The configured policy. A value that is
            not a known policy is treated as ALWAYS.

    Returns:
        bool: The eligibility decision.
    """
    if policy == ReprocessPolicy.ALWAYS:
        eligible = True
    elif policy == ReprocessPolicy.FIRST_TIME_ONLY:
        eligible = _is_first_time(ref)
    elif policy == ReprocessPolicy.URL_CHANGED:
        eligible = _has_document_key_changed(ref)
    else:
        log.warning(f"Unknown reprocess policy: {policy!r}, defaulting to ALWAYS")
        eligible = True

    log.debug(f"[Order: {ref.orderId}] Eligibility: {eligible} (policy: {policy})")
    return eligible


def _is_first_time(ref: OrderReference) -> bool:
    return ref.priorDocumentKey is None


def _has_document_key_changed(ref: OrderReference) -> bool:
    # Known gap: previous document keys are not tracked, so there is nothing
    # to compare against. Every reference counts as changed.
    return True
