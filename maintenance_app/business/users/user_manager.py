"""
UserManager - Business logic for user accounts

Responsibilities:
- Create, edit and delete users (email unique, password hashed)
- Authenticate email + password against the stored credential
"""

import random
import re
from typing import Any, Dict, List, Optional

from maintenance_app.business.core.action_result import ActionResult
from maintenance_app.business.core.auth_context import AuthContext
from maintenance_app.business.users.passwords import hash_password, needs_rehash, verify_password
from maintenance_app.data.core.user import User
from maintenance_app.data.storage.base import DuplicateKeyError
from maintenance_app.data.storage.repository import USERS
from maintenance_app.logger import get_logger

logger = get_logger("maintenance_app.business.users")

EMAIL_IN_USE_ERROR = 'Este e-mail já está em uso.'
NOT_FOUND_ERROR = 'Usuário não encontrado.'

EDITABLE_FIELDS = ('email', 'name', 'cargo', 'role', 'avatarUrl', 'password')
# What a user may change on their own profile
PROFILE_FIELDS = ('name', 'cargo', 'avatarUrl', 'password')
RANDOM_ID_ATTEMPTS = 20


def _slug(name: str) -> str:
    return re.sub(r'\s', '-', name.strip().lower())


class UserManager:

    def __init__(self, repository):
        self.repository = repository

    def list_users(self) -> List[User]:
        return [User.from_dict(d) for d in self.repository.users.get_all()]

    def get_user(self, user_id: str) -> Optional[User]:
        document = self.repository.users.get_by_id(user_id) if user_id else None
        return User.from_dict(document) if document is not None else None

    def find_by_email(self, email: str) -> Optional[User]:
        email = (email or '').strip().lower()
        if not email:
            return None
        for user in self.list_users():
            if (user.email or '').strip().lower() == email:
                return user
        return None

    def authenticate(self, email: str, password: str) -> Optional[User]:
        """
        Return the user when the password matches the stored credential,
        None otherwise. Storage failures propagate.
        """
        user = self.find_by_email(email)
        if user is None:
            logger.warning(f"Login attempt for unknown email: {email}")
            return None
        if not verify_password(user.password or '', password):
            logger.warning(f"Failed login attempt for {email}")
            return None
        if needs_rehash(user.password or ''):
            logger.info(f"User {user.id} still has a legacy password format")
        return user

    def _new_user_id(self, name: str) -> str:
        existing = {u.id for u in self.list_users()}
        prefix = f'user-{_slug(name)}-'
        for _ in range(RANDOM_ID_ATTEMPTS):
            candidate = f'{prefix}{random.randint(0, 999)}'
            if candidate not in existing:
                return candidate
        # Random three-digit suffixes keep colliding for this name
        suffix = 1000
        while f'{prefix}{suffix}' in existing:
            suffix += 1
        return f'{prefix}{suffix}'

    def create_user(self, ctx: AuthContext, data: Dict[str, Any]) -> ActionResult:
        data = data or {}
        email = (data.get('email') or '').strip()
        name = (data.get('name') or '').strip()
        password = data.get('password') or ''
        if not email or not name or not password:
            return ActionResult.fail('Nome, e-mail e senha são obrigatórios.')
        if self.find_by_email(email) is not None:
            return ActionResult.conflict(EMAIL_IN_USE_ERROR)

        user = User(
            id=self._new_user_id(name),
            email=email,
            password=hash_password(password),
            name=name,
            cargo=data.get('cargo') or '',
            role=data.get('role'),
            avatar_url='',
        )
        try:
            self.repository.users.add(user.to_dict())
        except DuplicateKeyError:
            return ActionResult.conflict(f'Já existe um usuário com o id {user.id}.')

        self.repository.invalidate_views(USERS)
        logger.info(f"{ctx} created user {user.id} ({user.role})")
        return ActionResult.ok(user.public_dict())

    def update_user(self, ctx: AuthContext, user_id: str, partial: Dict[str, Any]) -> ActionResult:
        if self.repository.users.get_by_id(user_id) is None:
            return ActionResult.not_found(NOT_FOUND_ERROR)

        changes = {k: v for k, v in (partial or {}).items() if k in EDITABLE_FIELDS}
        if 'password' in changes:
            if changes['password']:
                changes['password'] = hash_password(changes['password'])
            else:
                del changes['password']
        if 'email' in changes:
            email = (changes['email'] or '').strip()
            if not email:
                return ActionResult.fail('O e-mail é obrigatório.')
            other = self.find_by_email(email)
            if other is not None and other.id != user_id:
                return ActionResult.conflict(EMAIL_IN_USE_ERROR)
            changes['email'] = email
        if 'name' in changes and not (changes['name'] or '').strip():
            return ActionResult.fail('O nome é obrigatório.')

        updated = self.repository.users.update(user_id, changes)
        self.repository.invalidate_views(USERS)
        logger.info(f"{ctx} updated user {user_id}: {', '.join(sorted(changes)) or 'no changes'}")
        return ActionResult.ok(User.from_dict(updated).public_dict())

    def update_profile(self, ctx: AuthContext, partial: Dict[str, Any]) -> ActionResult:
        """Self-service edit of the caller's own record; email and role stay untouched."""
        changes = {k: v for k, v in (partial or {}).items() if k in PROFILE_FIELDS}
        return self.update_user(ctx, ctx.user_id, changes)

    def delete_user(self, ctx: AuthContext, user_id: str) -> ActionResult:
        if ctx.user_id == user_id:
            return ActionResult.fail('Você não pode excluir o seu próprio usuário.')
        self.repository.users.delete(user_id)
        self.repository.invalidate_views(USERS)
        logger.info(f"{ctx} deleted user {user_id}")
        return ActionResult.ok({'id': user_id})
