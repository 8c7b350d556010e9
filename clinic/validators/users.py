from __future__ import annotations

from rest_framework import serializers

from ..domain.base import from_wire
from ..domain.users import (
    DoctorDomainModel,
    DoctorSearchFilters,
    PatientDomainModel,
    PatientSearchFilters,
    UserDomainModel,
)
from .base import BaseSearchQuerySerializer, BaseValidator, PhoneField, SanitizedCharField, guess_prefix

GENDERS = ['Male', 'Female', 'Intersex', 'Other', 'Unknown']


class UserSerializer(serializers.Serializer):
    Phone = PhoneField(max_length=32)
    Email = serializers.EmailField(required=False, allow_null=True, allow_blank=True)
    UserName = SanitizedCharField(required=False, allow_null=True, max_length=150)
    Password = serializers.CharField(required=False, allow_null=True, min_length=6, max_length=128,
                                     trim_whitespace=False)
    FirstName = SanitizedCharField(required=False, allow_null=True, allow_blank=True, max_length=150)
    LastName = SanitizedCharField(required=False, allow_null=True, allow_blank=True, max_length=150)
    Prefix = SanitizedCharField(required=False, allow_null=True, max_length=16)
    Gender = serializers.ChoiceField(required=False, allow_null=True, choices=GENDERS)
    BirthDate = serializers.DateField(required=False, allow_null=True)
    DefaultTimeZone = serializers.RegexField(r'^[+-]\d{2}:\d{2}$', required=False, allow_null=True)
    CurrentTimeZone = serializers.RegexField(r'^[+-]\d{2}:\d{2}$', required=False, allow_null=True)


class PatientSerializer(UserSerializer):
    EhrId = serializers.CharField(required=False, allow_null=True, max_length=128)
    Addresses = serializers.ListField(child=serializers.DictField(), required=False, allow_null=True)


class DoctorSerializer(UserSerializer):
    EhrId = serializers.CharField(required=False, allow_null=True, max_length=128)
    Specialities = serializers.ListField(child=SanitizedCharField(max_length=64), required=False, allow_null=True)
    About = SanitizedCharField(required=False, allow_null=True, allow_blank=True)


class PersonQuerySerializer(BaseSearchQuerySerializer):
    name = SanitizedCharField(required=False)
    phone = serializers.CharField(required=False)
    email = serializers.CharField(required=False)
    gender = serializers.ChoiceField(required=False, choices=GENDERS)


class PatientQuerySerializer(PersonQuerySerializer):
    birthDateFrom = serializers.DateField(required=False)
    birthDateTo = serializers.DateField(required=False)


class DoctorQuerySerializer(PersonQuerySerializer):
    speciality = SanitizedCharField(required=False)


class PersonValidator(BaseValidator):
    serializer_class: type = UserSerializer
    query_serializer_class: type = PersonQuerySerializer
    domain_model: type = object
    search_filters: type = object

    def _to_model(self, validated: dict):
        user = from_wire(UserDomainModel, validated)
        if user.gender and not user.prefix:
            user.prefix = guess_prefix(user.gender)
        model = self.to_model(self.domain_model, validated)
        model.user = user
        return model

    def create(self, request):
        return self._to_model(self.validate(self.serializer_class, request.data))

    def update(self, request):
        return self._to_model(self.validate(self.serializer_class, request.data, partial=True))

    def search(self, request):
        vd = self.validate(self.query_serializer_class, request.query_params)
        return self.to_filters(self.search_filters, vd)


class PatientValidator(PersonValidator):
    serializer_class = PatientSerializer
    query_serializer_class = PatientQuerySerializer
    domain_model = PatientDomainModel
    search_filters = PatientSearchFilters


class DoctorValidator(PersonValidator):
    serializer_class = DoctorSerializer
    query_serializer_class = DoctorQuerySerializer
    domain_model = DoctorDomainModel
    search_filters = DoctorSearchFilters


# -- authentication ----------------------------------------------------------

class LoginSerializer(serializers.Serializer):
    UserName = serializers.CharField(required=False, max_length=150)
    Phone = PhoneField(required=False, max_length=32)
    Email = serializers.EmailField(required=False)
    Password = serializers.CharField(trim_whitespace=False)
    Role = serializers.ChoiceField(required=False, choices=['patient', 'doctor', 'admin', 'system'])

    def validate(self, attrs):
        if not (attrs.get('UserName') or attrs.get('Phone') or attrs.get('Email')):
            raise serializers.ValidationError({'UserName': ['One of UserName, Phone or Email is required.']})
        return attrs


class AppRegistrationSerializer(serializers.Serializer):
    AppName = SanitizedCharField(max_length=128)


class UserValidator(BaseValidator):

    def login(self, request) -> dict:
        return self.validate(LoginSerializer, request.data)

    def app_registration(self, request) -> str:
        return self.validate(AppRegistrationSerializer, request.data)['AppName']
