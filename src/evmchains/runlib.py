import hyapp.logs as hyapp_logs

from .settings import Settings

INIT_STATE: dict[str, Settings] = {}


def init_logs(settings: Settings) -> None:
    if settings.opts.env in ("dev", "tests"):
        hyapp_logs.init_dev_logs()
        return

    hyapp_logs.init_logs()


def init_all(settings: Settings | None = None) -> None:
    from .common import check_default_catalog, get_default_catalog

    if settings is None:
        settings = Settings()

    # Allow for re-calling.
    if INIT_STATE:
        prev_settings = INIT_STATE["settings"]
        if settings != prev_settings:
            raise Exception(f"Trying to initialize with different settings: {settings=!r} != {prev_settings=!r}")
        return

    # A `get_chain` before `init_all` might have already created the catalog from the environment.
    check_default_catalog(settings)
    INIT_STATE["settings"] = settings

    init_logs(settings)

    if settings.opts.preload_catalog:
        # Broken chains data should fail the startup, not the first lookup.
        get_default_catalog().load()
