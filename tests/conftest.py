import os
import sys

# Put the project root on sys.path so ``import adaptive_mi`` works without
# installing the package.
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
