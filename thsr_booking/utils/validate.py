"""
This module is to validate id numbers.
"""
import re

# Letter -> two digit area code used by the ROC national ID checksum
ROC_AREA_CODES = {
    'A': 10, 'B': 11, 'C': 12, 'D': 13, 'E': 14, 'F': 15, 'G': 16, 'H': 17,
    'I': 34, 'J': 18, 'K': 19, 'L': 20, 'M': 21, 'N': 22, 'O': 35, 'P': 23,
    'Q': 24, 'R': 25, 'S': 26, 'T': 27, 'U': 28, 'V': 29, 'W': 32, 'X': 30,
    'Y': 31, 'Z': 33,
}


def check_roc_id(roc_id: str) -> bool:
    """Check the ROC (Taiwan) national id number"""

    if not roc_id:
        return False

    roc_id = roc_id.strip().upper()
    if not re.fullmatch(r'[A-Z][12]\d{8}', roc_id):
        return False

    area = ROC_AREA_CODES[roc_id[0]]
    digits = [area // 10, area % 10] + [int(i) for i in roc_id[1:]]
    weights = [1, 9, 8, 7, 6, 5, 4, 3, 2, 1, 1]

    return sum(d * w for d, w in zip(digits, weights)) % 10 == 0
