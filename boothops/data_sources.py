"""
Tenant data source routing
Maps an application tenant to the database holding its business records
"""

import logging
import time
from dataclasses import dataclass
from threading import Lock
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken
from fastapi import HTTPException
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .config import (
    DATA_SOURCE_ENCRYPTION_KEY,
    TENANT_CONFIG_CACHE_TTL,
    TENANT_ENGINE_CACHE_TTL,
)
from .database import create_db_engine
from .models_app import Tenant

logger = logging.getLogger(__name__)


@dataclass
class DataSourceConfig:
    tenant_id: str
    url: str
    data_tenant_id: str
    loaded_at: float


def decrypt_data_source_url(value: str) -> str:
    """Decrypt a stored connection URL; plaintext is returned as-is when no key is set"""
    if not DATA_SOURCE_ENCRYPTION_KEY:
        return value
    try:
        return Fernet(DATA_SOURCE_ENCRYPTION_KEY.encode()).decrypt(value.encode()).decode()
    except InvalidToken:
        logger.error("❌ Failed to decrypt tenant data source URL - check DATA_SOURCE_ENCRYPTION_KEY")
        raise HTTPException(status_code=500, detail="Tenant data source is misconfigured")


def encrypt_data_source_url(value: str) -> str:
    if not DATA_SOURCE_ENCRYPTION_KEY:
        return value
    return Fernet(DATA_SOURCE_ENCRYPTION_KEY.encode()).encrypt(value.encode()).decode()


class TenantDataSourceManager:
    """Caches tenant connection configs and their engines"""

    def __init__(
        self,
        config_ttl: int = TENANT_CONFIG_CACHE_TTL,
        engine_ttl: int = TENANT_ENGINE_CACHE_TTL,
    ):
        self.config_ttl = config_ttl
        self.engine_ttl = engine_ttl
        self._configs: dict[str, DataSourceConfig] = {}
        # url -> (engine, sessionmaker, created_at)
        self._engines: dict[str, tuple[Engine, sessionmaker, float]] = {}
        self._lock = Lock()

    def get_config(self, app_db: Session, tenant_id: str) -> DataSourceConfig:
        now = time.time()
        with self._lock:
            cached = self._configs.get(tenant_id)
            if cached and now - cached.loaded_at < self.config_ttl:
                return cached

        tenant = app_db.query(Tenant).filter(Tenant.id == tenant_id).first()
        if not tenant or not tenant.is_active:
            raise HTTPException(status_code=404, detail="Tenant not found")
        if not tenant.data_source_url:
            logger.error(f"❌ Tenant {tenant_id} has no data source configured")
            raise HTTPException(status_code=500, detail="Tenant data source is not configured")

        config = DataSourceConfig(
            tenant_id=tenant.id,
            url=decrypt_data_source_url(tenant.data_source_url),
            data_tenant_id=tenant.tenant_id_in_data_source or tenant.id,
            loaded_at=now,
        )
        with self._lock:
            self._configs[tenant_id] = config
        logger.debug(f"🔍 Loaded data source config for tenant {tenant_id}")
        return config

    def _get_sessionmaker(self, url: str) -> sessionmaker:
        now = time.time()
        with self._lock:
            cached = self._engines.get(url)
            if cached and now - cached[2] < self.engine_ttl:
                return cached[1]
            if cached:
                cached[0].dispose()
                logger.info("♻️ Recycled expired tenant engine")

            engine = create_db_engine(url)
            factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
            self._engines[url] = (engine, factory, now)
            return factory

    def open_session(self, app_db: Session, tenant_id: str) -> tuple[Session, DataSourceConfig]:
        config = self.get_config(app_db, tenant_id)
        return self._get_sessionmaker(config.url)(), config

    def invalidate(self, tenant_id: Optional[str] = None) -> None:
        """Drop cached configs (all of them when tenant_id is None) and, for a full reset, engines"""
        with self._lock:
            if tenant_id:
                self._configs.pop(tenant_id, None)
                return
            self._configs.clear()
            for engine, _factory, _created in self._engines.values():
                engine.dispose()
            self._engines.clear()


data_source_manager = TenantDataSourceManager()
