# models/company.py
from database import db


class Company(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, unique=True)

    user = db.relationship("User", back_populates="company")
    projects = db.relationship('Project', back_populates='company', lazy=True)

    def __repr__(self):
        return f'<Company {self.name}>'
