from bos.business.companies.api import router
from bos.business.companies.models import Company
from bos.business.companies.schemas import CompanyCreate, CompanyRead, CompanyUpdate
from bos.business.companies.service import CompanyService, company_service

__all__ = [
    "router",
    "Company",
    "CompanyCreate",
    "CompanyRead",
    "CompanyUpdate",
    "CompanyService",
    "company_service",
]
