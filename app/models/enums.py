from enum import Enum

class PaymentType(str, Enum):
    cash = "CSH"
    check = "CHK"
    other = "OTH"

class TransactionType(str, Enum):
    expense = "EXP"
    transaction = "TRN"
    other = "OTH"

class AttachmentOwner(str, Enum):
    debt = "debt"
    transaction = "transaction"
