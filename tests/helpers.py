"""Shared test documents.

Offsets used throughout the tests are computed against these exact strings.
"""

from __future__ import annotations

# Heading A: [0, 17), Heading B: [17, 45)
SCENARIO_A = "* Heading A\nbody\n* Heading B :locked:\nsecret\n"

# Parent: [0, 52), Child one: [15, 34), Child two: [34, 52), Sibling: [52, 68)
NESTED = "* Parent\nintro\n** Child one\nalpha\n** Child two\nbeta\n* Sibling\ngamma\n"
