from sqlalchemy import Boolean, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from registry_lock.core.db import RegistryBase


class Registrar(RegistryBase):
    __tablename__ = "registrars"

    client_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    registry_lock_allowed: Mapped[bool] = mapped_column(Boolean, default=False)

    contacts: Mapped[list["RegistrarContact"]] = relationship(back_populates="registrar")


class RegistrarContact(RegistryBase):
    __tablename__ = "registrar_contacts"
    __table_args__ = (
        UniqueConstraint("registrar_client_id", "email_address", name="uq_registrar_contact_email"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    registrar_client_id: Mapped[str] = mapped_column(ForeignKey("registrars.client_id"), index=True)
    email_address: Mapped[str] = mapped_column(String(255), index=True)
    registry_lock_allowed: Mapped[bool] = mapped_column(Boolean, default=False)

    registrar: Mapped[Registrar] = relationship(back_populates="contacts")
