# bank_codes.py
import re
from typing import Mapping, Optional

# Nigerian bank name -> NIP/CBN bank code (extend as needed)
BANK_CODES = {
    "Access Bank": "044",
    "Access Bank (Diamond)": "063",
    "ALAT by WEMA": "035A",
    "Carbon": "565",
    "Citibank Nigeria": "023",
    "Coronation Merchant Bank": "559",
    "Ecobank Nigeria": "050",
    "Fidelity Bank": "070",
    "First Bank of Nigeria": "011",
    "First City Monument Bank": "214",
    "FSDH Merchant Bank": "501",
    "Globus Bank": "00103",
    "Guaranty Trust Bank": "058",
    "Heritage Bank": "030",
    "Jaiz Bank": "301",
    "Keystone Bank": "082",
    "Kuda Bank": "50211",
    "Lotus Bank": "303",
    "Moniepoint MFB": "50515",
    "Nova Merchant Bank": "561",
    "OPay": "999992",
    "Optimus Bank": "107",
    "PalmPay": "999991",
    "Parallex Bank": "104",
    "Polaris Bank": "076",
    "PremiumTrust Bank": "105",
    "Providus Bank": "101",
    "Rand Merchant Bank": "502",
    "Rubies MFB": "125",
    "Signature Bank": "106",
    "Sparkle Microfinance Bank": "51310",
    "Stanbic IBTC Bank": "221",
    "Standard Chartered Bank": "068",
    "Sterling Bank": "232",
    "Suntrust Bank": "100",
    "TAJ Bank": "302",
    "Titan Trust Bank": "102",
    "Union Bank of Nigeria": "032",
    "United Bank For Africa": "033",
    "Unity Bank": "215",
    "VFD Microfinance Bank": "566",
    "Wema Bank": "035",
    "Zenith Bank": "057",
}


def normalize_bank_name(name: str) -> str:
    """Collapse whitespace and lower-case."""
    return re.sub(r"\s+", " ", name).strip().lower()


def find_bank_code(name: str, table: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """
    Return the bank code for ``name`` or None when the table has no match.

    An exact key wins; otherwise names are compared after normalization.
    """
    banks = BANK_CODES if table is None else table

    code = banks.get(name)
    if code:
        return code

    wanted = normalize_bank_name(name)
    for bank_name, bank_code in banks.items():
        if normalize_bank_name(bank_name) == wanted:
            return bank_code
    return None
