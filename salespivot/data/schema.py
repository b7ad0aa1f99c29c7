"""
salespivot/data/schema.py

Known field names of the sales line-items produced by the voucher parser, and the field
classification rules used by the card builder.

Records are not validated against this list: the engine works on whatever keys a record has.
These constants only help the loader (date range reporting) and the field catalog (picking sensible
defaults for custom cards).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List


DATE_FIELDS: List[str] = ["date", "cp_date"]

# Fields that are always categories, even when their values look numeric.
FORCE_CATEGORY_FIELDS: List[str] = [
    # dates
    "date", "cp_date", "cpdate", "transaction_date", "voucher_date", "bill_date",
    # locations
    "pincode", "pin_code", "pin", "zipcode", "zip",
    # voucher and party identifiers
    "vouchernumber", "vchno", "voucher_number", "masterid", "alterid",
    "partyledgernameid", "partyid", "stockitemnameid", "itemid",
    "partygstin", "gstin", "gst_no", "pan",
    # contacts
    "phone", "mobile", "telephone", "contact",
    # references
    "reference", "ref_no", "invoice_no", "bill_no",
    # addresses
    "address", "basicbuyeraddress", "buyer_address",
    # other
    "reservedname", "vchtype", "vouchertypename", "issales",
]

# Name fragments of numeric fields better summarized with an average than a sum.
AVERAGE_HINTS: List[str] = ["rate", "price", "margin", "percent"]

# Top-level path segment -> display group in the field picker.
HIERARCHY_MAP: Dict[str, str] = {
    "voucher": "Voucher Fields",
    "ledgerentries": "Ledger Entries",
    "billallocations": "Bill Allocations",
    "allinventoryentries": "Inventory Entries",
    "inventoryentries": "Inventory Entries",
    "batchallocation": "Batch Allocations",
    "accountingallocation": "Accounting Allocations",
    "address": "Address",
}

HIERARCHY_ORDER: List[str] = [
    "voucher", "ledgerentries", "billallocations",
    "allinventoryentries", "batchallocation", "accountingallocation", "address",
]


@dataclass(frozen=True)
class SalesSchema:
    """
    Class that contains the field conventions of the sales records. Easily accessible.
    Used by the loader and the field catalog.
    """
    date_fields: List[str]
    force_category_fields: List[str]
    average_hints: List[str]

    @classmethod
    def sales_default(cls) -> "SalesSchema":
        return cls(
            date_fields=DATE_FIELDS,
            force_category_fields=FORCE_CATEGORY_FIELDS,
            average_hints=AVERAGE_HINTS,
        )

    def is_forced_category(self, field_path: str) -> bool:
        name = field_path.lower()
        return any(name == cat or cat in name or name in cat for cat in self.force_category_fields)

    def default_aggregation(self, field_path: str) -> str:
        name = field_path.lower()
        return "average" if any(hint in name for hint in self.average_hints) else "sum"
