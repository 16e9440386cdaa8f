from __future__ import annotations

from .ad import ADClient, ADConfig
from .env_settings import EnvSettings, get_env
from .log_config import setup_logging
from .services import UserService
from .utils.passwords import PasswordPools


def ad_cfg_from_env(env: EnvSettings) -> ADConfig:
    return ADConfig(
        host=env.ad_host,
        domain=env.ad_domain,
        port=env.ad_port,
        use_ssl=env.ad_use_ssl,
        starttls=env.ad_starttls,
        bind_username=env.ad_bind_username,
        bind_password=env.ad_bind_password,
        tls_validate=env.ad_tls_validate,
        ca_file=env.ad_ca_file,
        connect_timeout=env.ad_connect_timeout,
        base_dn_override=env.ad_base_dn,
    )


def pools_from_env(env: EnvSettings) -> PasswordPools:
    return PasswordPools(
        specials=env.password_specials,
        digits=env.password_digits,
        letters=env.password_letters,
    )


def create_user_service(
    env: EnvSettings | None = None, *, configure_logging: bool = False
) -> UserService:
    """Build a `UserService` wired to a live directory client."""
    env = env or get_env()
    if configure_logging:
        setup_logging(level=env.log_level, log_file=env.log_file)
    client = ADClient(ad_cfg_from_env(env))
    return UserService(client, pools=pools_from_env(env))
