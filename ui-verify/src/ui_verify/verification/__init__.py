"""Verification core: polling, matching, pattern scanning and result building."""
