from datetime import datetime
from studyhall.extensions import db

class BugReport(db.Model):
    __tablename__ = 'bug_reports'

    id = db.Column(db.String(40), primary_key=True)  # "bug_<epoch millis>"
    timestamp = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    url = db.Column(db.String(500), nullable=True)
    description = db.Column(db.Text, nullable=False)
    error_info = db.Column(db.Text, nullable=False)
    user_agent = db.Column(db.String(500), nullable=True)
    is_read = db.Column(db.Boolean, default=False, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "url": self.url,
            "description": self.description,
            "error_info": self.error_info,
            "user_agent": self.user_agent,
            "is_read": self.is_read,
        }
