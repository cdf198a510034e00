"""Core computational modules for dicer-consensus.

This package contains the analysis engines:
- consensus: Replicate dicercall voting, tie resolution and chimeric filtering
"""
