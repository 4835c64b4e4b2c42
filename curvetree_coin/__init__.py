"""
curvetree-coin toolkit.

Privacy-preserving coins on a curve-tree accumulator over the Pallas/Vesta
cycle, with an R1CS bulletproof backend written in pure Python.

⚠️  PROOF OF CONCEPT - NOT PRODUCTION READY
"""

__version__ = "0.1.0"

DISCLAIMER = (
    "⚠️  curvetree-coin is a research prototype. The cryptography has not "
    "been audited; do not protect real value with it."
)


def print_disclaimer() -> None:
    """Print the prototype disclaimer to stdout."""
    print(DISCLAIMER)
