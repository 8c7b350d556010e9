"""Repositories for users, patients and doctors."""
from __future__ import annotations

from django.db.models import Q

from ..domain.users import DoctorDto, PatientDto, UserDomainModel, UserDto, UserSummaryDto
from ..models import Doctor, Patient, User, UserAppRegistration
from .base import BaseRepo, contains_position, storage_operation

# UserDomainModel attribute -> User column
USER_COLUMNS = {
    'user_name': 'username',
    'phone': 'phone',
    'email': 'email',
    'first_name': 'first_name',
    'last_name': 'last_name',
    'prefix': 'prefix',
    'gender': 'gender',
    'birth_date': 'birth_date',
    'role': 'role',
    'default_time_zone': 'default_time_zone',
    'current_time_zone': 'current_time_zone',
}


def display_name(user: User) -> str:
    name = ' '.join(p for p in (user.prefix, user.first_name, user.last_name) if p)
    return name or user.username


def user_dto(user: User) -> UserDto:
    return UserDto(
        id=user.id,
        user_name=user.username,
        phone=user.phone,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        prefix=user.prefix,
        gender=user.gender,
        birth_date=user.birth_date,
        role=user.role,
        default_time_zone=user.default_time_zone,
        current_time_zone=user.current_time_zone,
        display_name=display_name(user),
    )


def user_summary(user: User) -> UserSummaryDto:
    return UserSummaryDto(id=user.id, display_name=display_name(user), role=user.role)


class UserRepo:

    @storage_operation
    def get_by_id(self, user_id: str) -> UserDto | None:
        user = User.objects.filter(pk=user_id).first()
        return user_dto(user) if user else None

    @storage_operation
    def get_by_phone_and_role(self, phone: str, role: str) -> UserDto | None:
        user = User.objects.filter(phone=phone, role=role, is_active=True).first()
        return user_dto(user) if user else None

    @storage_operation
    def get_by_email_and_role(self, email: str, role: str) -> UserDto | None:
        user = User.objects.filter(email__iexact=email, role=role, is_active=True).first()
        return user_dto(user) if user else None

    @storage_operation
    def user_name_exists(self, user_name: str, exclude_user_id: str | None = None) -> bool:
        qs = User.objects.filter(username=user_name)
        if exclude_user_id:
            qs = qs.exclude(pk=exclude_user_id)
        return qs.exists()

    @storage_operation
    def user_exists_with_phone(self, phone: str) -> bool:
        return User.objects.filter(phone=phone).exists()

    @storage_operation
    def get_user_with_user_name(self, user_name: str) -> UserDto | None:
        user = User.objects.filter(username=user_name).first()
        return user_dto(user) if user else None

    @storage_operation
    def create(self, model: UserDomainModel) -> UserDto:
        values = {column: getattr(model, attr) for attr, column in USER_COLUMNS.items()
                  if getattr(model, attr) is not None and column != 'username'}
        user = User.objects.create_user(username=model.user_name, password=model.password, **values)
        return user_dto(user)

    @storage_operation
    def update(self, user_id: str, model: UserDomainModel) -> UserDto | None:
        user = User.objects.filter(pk=user_id).first()
        if user is None:
            return None
        changes = {}
        for attr, column in USER_COLUMNS.items():
            value = getattr(model, attr)
            if value is not None and getattr(user, column) != value:
                changes[column] = value
        if changes:
            User.objects.filter(pk=user_id).update(**changes)
        if model.password:
            user.refresh_from_db()
            user.set_password(model.password)
            user.save(update_fields=['password'])
        return self.get_by_id(user_id)

    @storage_operation
    def get_app_registrations(self, user_id: str) -> list[str]:
        return list(
            UserAppRegistration.objects.filter(user_id=user_id)
            .order_by('created_at', 'pk')
            .values_list('app_name', flat=True)
        )

    @storage_operation
    def add_app_registration(self, user_id: str, app_name: str) -> bool:
        _, created = UserAppRegistration.objects.get_or_create(user_id=user_id, app_name=app_name)
        return created


class _PersonRepo(BaseRepo):
    """Shared search and user-keyed operations for patients and doctors."""
    order_columns = {
        'CreatedAt': 'created_at',
        'FirstName': 'user__first_name',
        'LastName': 'user__last_name',
        'BirthDate': 'user__birth_date',
    }
    exact_filters = {
        'phone': 'user__phone',
        'email': 'user__email',
        'gender': 'user__gender',
    }

    def queryset(self):
        return self.model.objects.select_related('user')

    def apply_extra_filters(self, qs, filters):
        if filters.name:
            qs = qs.annotate(
                _pos_first_name=contains_position('user__first_name', filters.name),
                _pos_last_name=contains_position('user__last_name', filters.name),
            ).filter(Q(_pos_first_name__gt=0) | Q(_pos_last_name__gt=0))
        return qs

    @storage_operation
    def get_by_user_id(self, user_id: str):
        row = self.queryset().filter(user_id=user_id).first()
        return self.to_dto(row) if row else None

    @storage_operation
    def update_by_user_id(self, user_id: str, model):
        row = self.model.objects.filter(user_id=user_id).first()
        if row is None:
            return None
        return self.update(row.pk, model)

    @storage_operation
    def delete_by_user_id(self, user_id: str) -> bool:
        count, _ = self.model.objects.filter(user_id=user_id).delete()
        User.objects.filter(pk=user_id).update(is_active=False)
        return count > 0


class PatientRepo(_PersonRepo):
    model = Patient
    writable_fields = ('ehr_id', 'addresses')
    range_filters = {'user__birth_date': ('birth_date_from', 'birth_date_to')}

    @storage_operation
    def create(self, user_id: str, ehr_id: str | None = None, addresses: list | None = None) -> PatientDto:
        row = Patient.objects.create(user_id=user_id, ehr_id=ehr_id, addresses=addresses or [])
        return self.get_by_id(row.pk)

    def to_dto(self, row) -> PatientDto:
        return PatientDto(
            id=str(row.id),
            user_id=row.user_id,
            ehr_id=row.ehr_id,
            addresses=row.addresses or [],
            user=user_dto(row.user),
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


class DoctorRepo(_PersonRepo):
    model = Doctor
    writable_fields = ('ehr_id', 'specialities', 'about')

    @storage_operation
    def create(self, user_id: str, ehr_id: str | None = None, specialities: list | None = None,
               about: str | None = None) -> DoctorDto:
        row = Doctor.objects.create(user_id=user_id, ehr_id=ehr_id, specialities=specialities or [],
                                    about=about or '')
        return self.get_by_id(row.pk)

    def apply_extra_filters(self, qs, filters):
        qs = super().apply_extra_filters(qs, filters)
        if filters.speciality:
            # JSON text match
            qs = qs.filter(specialities__icontains=filters.speciality)
        return qs

    def to_dto(self, row) -> DoctorDto:
        return DoctorDto(
            id=str(row.id),
            user_id=row.user_id,
            ehr_id=row.ehr_id,
            specialities=row.specialities or [],
            about=row.about,
            user=user_dto(row.user),
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
