from backend.app.models.user import User
from backend.app.models.feedback import Feedback
