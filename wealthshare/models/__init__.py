# Automatically load all models so metadata knows them
from wealthshare.models.member_model import Member
from wealthshare.models.account_model import Account
from wealthshare.models.loan_model import Loan
from wealthshare.models.transaction_model import Transaction
