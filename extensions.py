from flask_sqlalchemy import SQLAlchemy
from flask_jwt_extended import JWTManager
from flask_cors import CORS

# Initialize them WITHOUT the 'app' variable
db = SQLAlchemy()
jwt = JWTManager()
cors = CORS()
