from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class EnvSettings(BaseSettings):
    ad_host: str = Field("", alias="AD_HOST")
    ad_port: int = Field(389, alias="AD_PORT")
    ad_use_ssl: bool = Field(False, alias="AD_USE_SSL")
    ad_starttls: bool = Field(True, alias="AD_STARTTLS")
    ad_domain: str = Field("", alias="AD_DOMAIN")
    ad_base_dn: str = Field("", alias="AD_BASE_DN")
    ad_bind_username: str = Field("", alias="AD_BIND_USERNAME")
    ad_bind_password: str = Field("", alias="AD_BIND_PASSWORD")
    ad_tls_validate: bool = Field(False, alias="AD_TLS_VALIDATE")
    ad_ca_file: str = Field("", alias="AD_CA_FILE")
    ad_connect_timeout: float = Field(5.0, alias="AD_CONNECT_TIMEOUT")

    password_specials: str = Field("!$%&/()=?_-{}*", alias="PASSWORD_SPECIALS", min_length=1)
    password_digits: str = Field("0123456789", alias="PASSWORD_DIGITS", min_length=1)
    password_letters: str = Field("qwertyuiopasdfghjklzxcvbnm", alias="PASSWORD_LETTERS", min_length=1)

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_file: str = Field("", alias="LOG_FILE")

    class Config:
        populate_by_name = True


@lru_cache(maxsize=1)
def get_env() -> EnvSettings:
    return EnvSettings()
