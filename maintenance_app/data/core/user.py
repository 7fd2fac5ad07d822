from dataclasses import dataclass
from typing import Optional

from flask_login import UserMixin

from maintenance_app.data.core.document import DocumentMixin, doc_field


@dataclass(eq=False)
class User(UserMixin, DocumentMixin):
    id: str = doc_field('id', '')
    email: str = doc_field('email', '')
    password: Optional[str] = doc_field('password')
    name: str = doc_field('name', '')
    cargo: Optional[str] = doc_field('cargo')
    role: Optional[str] = doc_field('role')
    avatar_url: Optional[str] = doc_field('avatarUrl')

    def public_dict(self):
        """Document without the stored credential."""
        document = self.to_dict()
        document.pop('password', None)
        return document

    def __repr__(self):
        return f'<User {self.email}>'
