"""A Module is one curriculum unit of a Project.

Modules of a Project are numbered 1..N by order_index without gaps or duplicates
Only the ordering service changes order_index
A Module can be completed once per Application (see ApplicationModuleProgress)

"""
from __future__ import annotations
from typing import Optional

import bleach
from database import db
from markdown import markdown as render_markdown
from markupsafe import Markup


def render_module_description_html(description: Optional[str]) -> Markup:
    """Render module description Markdown into sanitized HTML."""
    if not description:
        return Markup("")
    html = render_markdown(
        description,
        extensions=["extra", "sane_lists"],
        output_format="html5",
        tab_length=2,
    )
    allowed_tags = list(bleach.sanitizer.ALLOWED_TAGS) + [
        "p",
        "pre",
        "code",
        "ul",
        "ol",
        "li",
        "table",
        "thead",
        "tbody",
        "tr",
        "th",
        "td",
        "strong",
        "em",
        "blockquote",
        "br",
        "h3",
        "h4",
        "h5",
        "hr",
    ]
    allowed_attributes = {
        **bleach.sanitizer.ALLOWED_ATTRIBUTES,
        "a": ["href", "title", "target", "rel"],
        "code": ["class"],
    }
    sanitized_html = bleach.clean(html, tags=allowed_tags, attributes=allowed_attributes)
    return Markup(sanitized_html)


class ProjectModule(db.Model):
    __tablename__ = "project_module"

    id = db.Column(db.Integer, primary_key=True)
    project_id = db.Column(db.Integer, db.ForeignKey("project.id"), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    estimated_duration = db.Column(db.String(100), nullable=True)
    order_index = db.Column(db.Integer, nullable=False)

    __table_args__ = (db.Index("ix_project_module_project_order", "project_id", "order_index"),)

    project = db.relationship("Project", back_populates="modules")
    progress_entries = db.relationship(
        "ApplicationModuleProgress",
        back_populates="module",
        lazy=True,
        cascade="all, delete-orphan",
    )

    @property
    def description_html(self) -> Markup:
        return render_module_description_html(self.description)

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-ready representation of the module."""

        return {
            "id": self.id,
            "project_id": self.project_id,
            "title": self.title,
            "description": self.description,
            "description_html": str(self.description_html),
            "duration": self.estimated_duration,
            "order_index": self.order_index,
        }

    def __repr__(self):
        return f"<ProjectModule {self.order_index}: {self.title}>"
