""" Represents a user in the system.

Users reach the platform either as a company representative or as a student.
A User with a Company profile can publish Projects and manage their Modules
A User with a Student profile can apply to Projects and track Module progress
Authentication is handled outside of this application; only the identity is stored here

"""

from database import db


class User(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    role = db.Column(db.String(80), nullable=False, default='student')
    name = db.Column(db.String(80), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)

    company = db.relationship("Company", back_populates="user", uselist=False, lazy=True)
    student = db.relationship("Student", back_populates="user", uselist=False, lazy=True)
    notifications = db.relationship(
        "Notification",
        back_populates="user",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    ADMIN = 'admin'
    COMPANY = 'company'
    STUDENT = 'student'

    def __repr__(self):
        return f"<User {self.id}>"
