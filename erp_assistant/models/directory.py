"""
Tenant Directory Projections

Lightweight, read-only views of a tenant's accounts, partners, products,
employees and leads. They are used ONLY to build hint text for the
language model; drafting never depends on them for correctness.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class AccountRecord(BaseModel):
    code: str
    name: str
    type: Optional[str] = None
    category: Optional[str] = None
    balance: Optional[Decimal] = None


class PartnerRecord(BaseModel):
    name: str
    type: Optional[str] = None
    email: Optional[str] = None


class ProductRecord(BaseModel):
    name: str
    price: Optional[Decimal] = None
    type: Optional[str] = None


class EmployeeRecord(BaseModel):
    first_name: str
    last_name: str = ""
    department: Optional[str] = None
    position: Optional[str] = None


class LeadRecord(BaseModel):
    name: str
    status: Optional[str] = None


class ContextHints(BaseModel):
    """All hint lists for one tenant. Empty lists are valid."""

    accounts: list[AccountRecord] = Field(default_factory=list)
    partners: list[PartnerRecord] = Field(default_factory=list)
    products: list[ProductRecord] = Field(default_factory=list)
    employees: list[EmployeeRecord] = Field(default_factory=list)
    leads: list[LeadRecord] = Field(default_factory=list)

    def render(self) -> dict[str, str]:
        """Render each list as the prompt text the model sees."""
        return {
            "accounts": "\n".join(
                f"{a.code}:{a.name} ({a.type or 'unknown'})" for a in self.accounts
            ) or "(No accounts available)",
            "partners": ", ".join(
                f"{p.name} ({p.type or 'unknown'})" for p in self.partners
            ) or "(No partners available)",
            "products": ", ".join(
                f"{p.name} ({p.price if p.price is not None else '?'})"
                for p in self.products
            ) or "(No products available)",
            "employees": ", ".join(
                f"{e.first_name} {e.last_name}".strip() + f" ({e.department or 'unknown'})"
                for e in self.employees
            ) or "(No employees available)",
            "leads": ", ".join(
                f"{l.name} ({l.status or 'unknown'})" for l in self.leads
            ) or "(No leads available)",
        }
