"""Tenant settings repository - dotted key/value configuration per tenant"""

from typing import Any, Optional

from sqlalchemy.orm import Session

from ...models import TenantSetting


class SettingsRepository:
    @staticmethod
    def get_value(db: Session, tenant_id: str, key: str, default: Any = None) -> Any:
        setting = (
            db.query(TenantSetting)
            .filter(TenantSetting.tenant_id == tenant_id, TenantSetting.setting_key == key)
            .first()
        )
        if setting is None or setting.setting_value in (None, ""):
            return default
        return setting.setting_value

    @staticmethod
    def get_all(db: Session, tenant_id: str, prefix: Optional[str] = None) -> dict[str, Any]:
        query = db.query(TenantSetting).filter(TenantSetting.tenant_id == tenant_id)
        if prefix:
            query = query.filter(TenantSetting.setting_key.like(f"{prefix}.%"))
        return {s.setting_key: s.setting_value for s in query.order_by(TenantSetting.setting_key)}

    @staticmethod
    def upsert(db: Session, tenant_id: str, key: str, value: Any) -> TenantSetting:
        setting = (
            db.query(TenantSetting)
            .filter(TenantSetting.tenant_id == tenant_id, TenantSetting.setting_key == key)
            .first()
        )
        if setting:
            setting.setting_value = value
        else:
            setting = TenantSetting(tenant_id=tenant_id, setting_key=key, setting_value=value)
            db.add(setting)
        db.commit()
        db.refresh(setting)
        return setting

    @staticmethod
    def delete(db: Session, tenant_id: str, key: str) -> bool:
        deleted = (
            db.query(TenantSetting)
            .filter(TenantSetting.tenant_id == tenant_id, TenantSetting.setting_key == key)
            .delete()
        )
        db.commit()
        return bool(deleted)

    @classmethod
    def company_info(cls, db: Session, tenant_id: str, fallback_name: str) -> dict[str, str]:
        """Company block printed on invoices and used in emails"""
        return {
            "name": cls.get_value(db, tenant_id, "company.name", fallback_name),
            "address": cls.get_value(db, tenant_id, "company.address", ""),
            "phone": cls.get_value(db, tenant_id, "company.phone", ""),
            "email": cls.get_value(db, tenant_id, "company.email", ""),
        }
