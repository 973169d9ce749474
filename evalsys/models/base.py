from datetime import date, datetime
from decimal import Decimal
from ..extensions import db


def camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p.title() for p in rest)


class TimestampMixin:
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())


class SerializeMixin:
    # columns never sent over the API
    __hidden__ = ()

    def to_dict(self) -> dict:
        out = {}
        for c in self.__table__.columns:
            if c.name in self.__hidden__:
                continue
            value = getattr(self, c.name)
            if isinstance(value, (datetime, date)):
                value = value.isoformat()
            elif isinstance(value, Decimal):
                value = float(value)
            out[camel(c.name)] = value
        return out
