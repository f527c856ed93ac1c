from typing import Optional

from stockroom.schemas.base import CamelModel


class CompanySettingsRead(CamelModel):
    company_name: str
    logo: Optional[str] = None


class CompanySettingsUpdate(CamelModel):
    company_name: Optional[str] = None


class LogoUploadResult(CamelModel):
    success: bool = True
    logo: str
