# models/student.py
from database import db


class Student(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(80), nullable=False)
    last_name = db.Column(db.String(80), nullable=False, default="")
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, unique=True)

    user = db.relationship("User", back_populates="student")
    applications = db.relationship("Application", back_populates="student", lazy=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self):
        return f'<Student {self.full_name}>'
