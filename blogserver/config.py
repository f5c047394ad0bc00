# blogserver/config.py

import os
import secrets
from dataclasses import dataclass, field
from dotenv import find_dotenv, load_dotenv


class ConfigError(RuntimeError):
    pass


@dataclass
class Settings:
    jwt_secret: str
    session_secret: str = field(default_factory=lambda: secrets.token_urlsafe(32))
    database_url: str = "sqlite:///./data/blog.db"
    db_timeout_sec: float = 60.0
    host: str = "0.0.0.0"
    port: int = 3000
    bcrypt_rounds: int = 10
    cloudinary_cloud_name: str | None = None
    cloudinary_api_key: str | None = None
    cloudinary_api_secret: str | None = None
    image_upload_timeout_sec: float = 20.0
    default_image_url: str = "/static/images/bg.svg"
    log_level: str = "INFO"

    @property
    def cloudinary_configured(self) -> bool:
        return bool(
            self.cloudinary_cloud_name
            and self.cloudinary_api_key
            and self.cloudinary_api_secret
        )

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Builds settings from the environment (and .env, if present).
        Refuses to build without JWT_SECRET.
        """
        load_dotenv(find_dotenv(usecwd=True))

        jwt_secret = os.getenv("JWT_SECRET")
        if not jwt_secret:
            raise ConfigError("JWT_SECRET is required in environment variables")

        kwargs = {
            "jwt_secret": jwt_secret,
            "database_url": os.getenv("DATABASE_URL", cls.database_url),
            "db_timeout_sec": float(os.getenv("DB_TIMEOUT_SEC", cls.db_timeout_sec)),
            "host": os.getenv("HOST", cls.host),
            "port": int(os.getenv("PORT", cls.port)),
            "bcrypt_rounds": int(os.getenv("BCRYPT_ROUNDS", cls.bcrypt_rounds)),
            "cloudinary_cloud_name": os.getenv("CLOUDINARY_CLOUD_NAME"),
            "cloudinary_api_key": os.getenv("CLOUDINARY_API_KEY"),
            "cloudinary_api_secret": os.getenv("CLOUDINARY_API_SECRET"),
            "image_upload_timeout_sec": float(
                os.getenv("IMAGE_UPLOAD_TIMEOUT_SEC", cls.image_upload_timeout_sec)
            ),
            "default_image_url": os.getenv("DEFAULT_IMAGE_URL", cls.default_image_url),
            "log_level": os.getenv("LOG_LEVEL", cls.log_level),
        }

        session_secret = os.getenv("SESSION_SECRET")
        if session_secret:
            kwargs["session_secret"] = session_secret

        return cls(**kwargs)
