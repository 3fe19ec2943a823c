from flask_sqlalchemy import SQLAlchemy
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from utils.logging import log_rate_limit_violation

db = SQLAlchemy()
jwt = JWTManager()
migrate = Migrate()
# Storage and default limits come from the RATELIMIT_* config keys.
limiter = Limiter(key_func=get_remote_address, on_breach=log_rate_limit_violation)
