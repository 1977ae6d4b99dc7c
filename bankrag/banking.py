"""Banking records and their text renderings for indexing.

The relational store that owns these records is external; this module only
describes the fields the indexer needs and how each record reads as text.
"""

from __future__ import annotations

import datetime
import json
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any

from .config import config

logger = config.get_logger(__name__)

DEPOSIT = "DEPOSIT"
TOP_SPENDING_CATEGORIES = 3


def _money(value: Any) -> Decimal:
    return Decimal(str(value))


def _optional_money(value: Any) -> Decimal | None:
    return None if value is None else _money(value)


def _optional_date(value: str | None) -> datetime.date | None:
    return None if value is None else datetime.date.fromisoformat(value)


@dataclass
class Customer:
    """A bank customer."""

    customer_id: str
    first_name: str
    last_name: str
    email: str
    customer_since: datetime.date
    segment: str
    risk_rating: str
    phone: str | None = None
    date_of_birth: datetime.date | None = None
    address_city: str | None = None
    address_state: str | None = None
    address_zip: str | None = None
    credit_score: int | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_profile_text(self) -> str:
        parts = [f"Customer {self.customer_id}: {self.full_name}"]
        parts.append(f"email: {self.email}")
        if self.phone is not None:
            parts.append(f"phone: {self.phone}")
        if self.date_of_birth is not None:
            parts.append(f"DOB: {self.date_of_birth.isoformat()}")
        if self.address_city is not None:
            parts.append(
                f"location: {self.address_city}, {self.address_state} "
                f"{self.address_zip}"
            )
        if self.credit_score is not None:
            parts.append(f"credit score: {self.credit_score}")
        parts.append(f"customer since: {self.customer_since.isoformat()}")
        parts.append(f"segment: {self.segment}")
        parts.append(f"risk rating: {self.risk_rating}")
        return ", ".join(parts)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Customer:
        return cls(
            customer_id=data["customer_id"],
            first_name=data["first_name"],
            last_name=data["last_name"],
            email=data["email"],
            customer_since=datetime.date.fromisoformat(data["customer_since"]),
            segment=data.get("segment", "RETAIL"),
            risk_rating=data.get("risk_rating", "LOW"),
            phone=data.get("phone"),
            date_of_birth=_optional_date(data.get("date_of_birth")),
            address_city=data.get("address_city"),
            address_state=data.get("address_state"),
            address_zip=data.get("address_zip"),
            credit_score=data.get("credit_score"),
        )


@dataclass
class Account:
    """A deposit, card or loan account owned by a customer."""

    account_number: str
    customer_id: str
    account_type: str
    balance: Decimal
    opened_date: datetime.date
    status: str = "ACTIVE"
    account_name: str | None = None
    currency: str = "USD"
    interest_rate: Decimal | None = None
    credit_limit: Decimal | None = None

    def to_summary_text(self, customer: Customer) -> str:
        text = (
            f"{self.account_type} account {self.account_number} "
            f"for customer {customer.customer_id} ({customer.full_name})"
            f", balance: ${self.balance}"
        )
        if self.interest_rate is not None:
            text += f", interest rate: {self.interest_rate}%"
        if self.credit_limit is not None:
            text += f", credit limit: ${self.credit_limit}"
        text += f", status: {self.status}, opened: {self.opened_date.isoformat()}"
        return text

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Account:
        return cls(
            account_number=data["account_number"],
            customer_id=data["customer_id"],
            account_type=data["account_type"],
            balance=_money(data.get("balance", "0")),
            opened_date=datetime.date.fromisoformat(data["opened_date"]),
            status=data.get("status", "ACTIVE"),
            account_name=data.get("account_name"),
            currency=data.get("currency", "USD"),
            interest_rate=_optional_money(data.get("interest_rate")),
            credit_limit=_optional_money(data.get("credit_limit")),
        )


@dataclass
class Transaction:
    """A single posted movement on an account."""

    transaction_id: str
    account_number: str
    transaction_type: str
    amount: Decimal
    transaction_date: datetime.datetime
    channel: str
    status: str = "COMPLETED"
    merchant_name: str | None = None
    merchant_category: str | None = None
    description: str | None = None
    balance_after: Decimal | None = None

    def to_description_text(self) -> str:
        text = (
            f"{self.transaction_type} of ${self.amount} on account "
            f"{self.account_number} on {self.transaction_date.date().isoformat()}"
        )
        if self.merchant_name is not None:
            text += f" at {self.merchant_name}"
        if self.merchant_category is not None:
            text += f" ({self.merchant_category})"
        if self.description is not None:
            text += f": {self.description}"
        text += f" via {self.channel}, status: {self.status}"
        if self.balance_after is not None:
            text += f", balance after: ${self.balance_after}"
        return text

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Transaction:
        return cls(
            transaction_id=data["transaction_id"],
            account_number=data["account_number"],
            transaction_type=data["transaction_type"],
            amount=_money(data["amount"]),
            transaction_date=datetime.datetime.fromisoformat(data["transaction_date"]),
            channel=data.get("channel", "ONLINE"),
            status=data.get("status", "COMPLETED"),
            merchant_name=data.get("merchant_name"),
            merchant_category=data.get("merchant_category"),
            description=data.get("description"),
            balance_after=_optional_money(data.get("balance_after")),
        )


def build_transaction_pattern(
    account: Account,
    customer: Customer,
    transactions: list[Transaction],
) -> str:
    """Summarize an account's transactions as one retrievable text.

    Returns:
        Totals, top spending categories and channel usage for the account.
    """
    total_deposits = Decimal(0)
    total_spending = Decimal(0)
    category_spend: dict[str, Decimal] = defaultdict(Decimal)

    for txn in transactions:
        if txn.transaction_type == DEPOSIT:
            total_deposits += txn.amount
        else:
            total_spending += txn.amount
        if txn.merchant_category is not None:
            category_spend[txn.merchant_category] += txn.amount

    text = (
        f"Transaction pattern for {account.account_type} account "
        f"{account.account_number} ({customer.full_name}): "
        f"{len(transactions)} transactions total. "
        f"Total deposits: ${total_deposits}. "
        f"Total spending: ${total_spending}."
    )

    if category_spend:
        top = sorted(category_spend.items(), key=lambda item: item[1], reverse=True)
        categories = ", ".join(
            f"{name} (${amount})" for name, amount in top[:TOP_SPENDING_CATEGORIES]
        )
        text += f" Top spending categories: {categories}."

    channels = Counter(txn.channel for txn in transactions)
    channel_text = ", ".join(f"{name} ({count})" for name, count in channels.items())
    text += f" Channels used: {channel_text}."
    return text


@dataclass
class BankingDataset:
    """In-memory snapshot of customers, accounts and transactions."""

    customers: list[Customer] = field(default_factory=list)
    accounts: list[Account] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._customers_by_id = {c.customer_id: c for c in self.customers}
        orphans = sorted(
            {
                account.customer_id
                for account in self.accounts
                if account.customer_id not in self._customers_by_id
            }
        )
        if orphans:
            msg = f"Accounts reference unknown customers: {', '.join(orphans)}"
            raise ValueError(msg)
        self._transactions_by_account: dict[str, list[Transaction]] = defaultdict(
            list
        )
        for txn in self.transactions:
            self._transactions_by_account[txn.account_number].append(txn)

    def customer(self, customer_id: str) -> Customer:
        """Look up a customer by id.

        Raises:
            KeyError: If the customer is unknown.

        Returns:
            The matching customer.
        """
        try:
            return self._customers_by_id[customer_id]
        except KeyError:
            msg = f"Unknown customer: {customer_id}"
            raise KeyError(msg) from None

    def transactions_for(self, account_number: str) -> list[Transaction]:
        return list(self._transactions_by_account.get(account_number, []))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BankingDataset:
        return cls(
            customers=[Customer.from_dict(item) for item in data.get("customers", [])],
            accounts=[Account.from_dict(item) for item in data.get("accounts", [])],
            transactions=[
                Transaction.from_dict(item) for item in data.get("transactions", [])
            ],
        )

    @classmethod
    def from_json(cls, path: Path) -> BankingDataset:
        """Load a dataset exported as JSON.

        Returns:
            Dataset with customers, accounts and transactions.
        """
        with Path(path).open(encoding="utf-8") as file:
            dataset = cls.from_dict(json.load(file))
        logger.info(
            "Loaded %d customers, %d accounts, %d transactions from %s",
            len(dataset.customers),
            len(dataset.accounts),
            len(dataset.transactions),
            path,
        )
        return dataset
