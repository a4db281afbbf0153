"""
Bills router.
"""

from fastapi import APIRouter, Depends

from rest_api.core.dependencies import get_bill_aggregator
from rest_api.services.domain import BillAggregator
from shared.utils.schemas import BillDetailOutput


router = APIRouter(prefix="/api/bills", tags=["bills"])


@router.get("/table/{table_id}", response_model=BillDetailOutput)
def get_table_bill(
    table_id: int,
    bills: BillAggregator = Depends(get_bill_aggregator),
) -> BillDetailOutput:
    """
    Current open bill of a table with every line item.

    Cancelled items are listed with their status but not counted in the total.
    A table with no OPEN bill gets an empty bill with a null id.
    """
    return bills.get_table_bill(table_id)
