import os
from datetime import date

from dotenv import load_dotenv

load_dotenv()

DB_URI = os.getenv('DATABASE_URL', 'sqlite:///medihub.db')
SECRET_KEY = os.getenv('SECRET_KEY', 'change-me')
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOGIN_RATE_LIMIT = os.getenv('LOGIN_RATE_LIMIT', '10 per minute')

# Shared secrets gating signup and login for staff roles.
ADMIN_SECURITY_CODE = os.getenv('ADMIN_SECURITY_CODE', 'ADMIN-2025')
EMPLOYEE_SECURITY_CODE = os.getenv('EMPLOYEE_SECURITY_CODE', 'EMPLOYEE-2025')
SUPPLIER_SECURITY_CODE = os.getenv('SUPPLIER_SECURITY_CODE', 'SUPPLIER-2025')

PLATFORM_FEE_RATE = 0.10
EARNINGS_START_DATE = date(2025, 1, 1)
DEFAULT_CONSULTATION_FEE = 100
BLOGS_PER_PAGE = 6
SIGNIN_LIMIT = 50
