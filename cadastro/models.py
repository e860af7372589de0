# cadastro/models.py
from dataclasses import dataclass, field, asdict
from typing import Optional, List, Dict, Any

@dataclass
class AddressInfo:
    postal_code: str
    street: Optional[str] = None
    neighborhood: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None

    def to_fields(self) -> Dict[str, Any]:
        """Campos de endereço como gravados na tabela users."""
        return {
            "street": self.street,
            "neighborhood": self.neighborhood,
            "city": self.city,
            "state": self.state,
        }

@dataclass
class User:
    id: Optional[int]
    name: str
    cpf: str
    phone: str
    postal_code: str
    street: Optional[str] = None
    neighborhood: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "User":
        return cls(
            id=row["id"],
            name=row["name"],
            cpf=(row["cpf"] or "").strip(),
            phone=(row["phone"] or "").strip(),
            postal_code=(row["postal_code"] or "").strip(),
            street=row.get("street"),
            neighborhood=row.get("neighborhood"),
            city=row.get("city"),
            state=row.get("state"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

@dataclass
class Page:
    data: List[User] = field(default_factory=list)
    page: int = 1
    limit: int = 10
    total: int = 0

    @property
    def last_page(self) -> int:
        if self.total == 0:
            return 1
        return (self.total + self.limit - 1) // self.limit

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": [u.to_dict() for u in self.data],
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "last_page": self.last_page,
        }
