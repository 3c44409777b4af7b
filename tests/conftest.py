import calendar
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# 2023-11-14 22:13:20 UTC
LOAD_TIME = 1_700_000_000
NEXT_MONTH = calendar.timegm((2023, 12, 14, 22, 13, 20))

SAMPLE_TEXT = """\
# Capitals deck
# kept in the header

>>
# geography
Q:
Capital of France?
A:
Paris
S:
    4 2 75
<<
# dropped comment

>>
Q:
2 + 2?
A:
4
S:
    4 2
<<
"""

LONG_TERM_TEXT = """\
# mixed deck

>>
Q:
Known by heart
A:
yes
S:
    12 10 90
<<

>>
Q:
Still learning
A:
no
S:
    3 1 33
<<
"""


@pytest.fixture
def sample_path(tmp_path):
    path = tmp_path / "cards.txt"
    path.write_text(SAMPLE_TEXT, encoding="utf-8")
    return path


@pytest.fixture
def long_term_path(tmp_path):
    path = tmp_path / "mixed.txt"
    path.write_text(LONG_TERM_TEXT, encoding="utf-8")
    return path
