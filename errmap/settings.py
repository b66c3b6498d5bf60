from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    LOG_LEVEL: str = 'INFO'
    DEFAULT_STATUS_CODE: int = Field(default=500, ge=100, le=599)
    DEFAULT_CODE: str = 'internal_error'
    DEFAULT_MESSAGE_TEMPLATE: str = 'An error occurred: {message}'
    GENERIC_MESSAGE: str = 'An error occurred.'
    EXPOSE_INTERNAL_MESSAGES: bool = True

    class Config:
        env_file = '.env'
        extra = 'ignore'

    @field_validator('LOG_LEVEL', mode='before')
    def normalize_log_level(cls, v):
        if v is None or str(v).strip() == '':
            return 'INFO'
        return str(v).strip().upper()

    @field_validator('DEFAULT_MESSAGE_TEMPLATE', mode='before')
    def require_message_placeholder(cls, v):
        if v is None or str(v).strip() == '':
            return 'An error occurred: {message}'
        if '{message}' not in str(v):
            raise ValueError('DEFAULT_MESSAGE_TEMPLATE must contain {message}')
        return v


settings = Settings()
