import logging
import threading

from . import runlib
from .chains import chain_decoder
from .chains.chain_catalog import ChainCatalog
from .chains.chain_models import ChainRecord
from .settings import Settings

LOGGER = logging.getLogger(__name__)

DEFAULT_STATE: dict[str, ChainCatalog] = {}
_DEFAULT_STATE_LOCK = threading.Lock()


def get_settings() -> Settings:
    return runlib.INIT_STATE.get("settings") or Settings()


def get_default_catalog() -> ChainCatalog:
    """The process-wide catalog, configured by `init_all` settings (or the environment)"""
    with _DEFAULT_STATE_LOCK:
        catalog = DEFAULT_STATE.get("catalog")
        if catalog is None:
            settings = get_settings()
            catalog = ChainCatalog.from_settings(settings)
            LOGGER.debug("Created the default chain catalog", extra=dict(x_data_dir=str(catalog.data_dir)))
            DEFAULT_STATE["catalog"] = catalog
    return catalog


def get_chain(chain_id: int) -> ChainRecord | None:
    """
    Chain by id from the default catalog, `None` if there's no such chain.

    The catalog is built on the first call; a broken data directory raises
    `CatalogBuildError` here (and on every later call).
    """
    return get_default_catalog().get(chain_id)


def decode_chain_file(chain_id: int) -> ChainRecord:
    """Read and decode the chain file directly, bypassing the catalog; raises `ChainError`"""
    return chain_decoder.decode_chain_file(chain_id, data_dir=get_settings().opts.data_dir)


def check_default_catalog(settings: Settings) -> None:
    """Fail if the default catalog was already created for a different configuration"""
    with _DEFAULT_STATE_LOCK:
        catalog = DEFAULT_STATE.get("catalog")
    if catalog is None:
        return
    expected = ChainCatalog.from_settings(settings)
    if (catalog.data_dir, catalog.strict_chain_id) != (expected.data_dir, expected.strict_chain_id):
        raise Exception(
            "The default chain catalog was created with different settings:"
            f" {catalog.data_dir=!r} != {expected.data_dir=!r}"
            f" or {catalog.strict_chain_id=!r} != {expected.strict_chain_id=!r}"
        )
