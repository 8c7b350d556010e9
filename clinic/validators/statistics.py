from __future__ import annotations

from rest_framework import serializers

from ..domain.statistics import AgeFilters, AppDownloadDomainModel, StatisticsFilters
from .base import BaseValidator, SanitizedCharField


class StatisticsQuerySerializer(serializers.Serializer):
    year = serializers.IntegerField(required=False, min_value=1900, max_value=9999)
    month = serializers.IntegerField(required=False, min_value=1, max_value=12)
    dateFrom = serializers.DateField(required=False)
    dateTo = serializers.DateField(required=False)
    pastMonths = serializers.IntegerField(required=False, min_value=1, max_value=120)

    def validate(self, attrs):
        if attrs.get('month') and not attrs.get('year'):
            raise serializers.ValidationError({'year': ['Year is required when month is given.']})
        return attrs


class AgeQuerySerializer(serializers.Serializer):
    year = serializers.IntegerField(required=False, min_value=1900, max_value=9999)
    ageFrom = serializers.IntegerField(required=False, min_value=0, max_value=150)
    ageTo = serializers.IntegerField(required=False, min_value=0, max_value=150)


class AppDownloadSerializer(serializers.Serializer):
    AppName = SanitizedCharField(max_length=128)
    TotalDownloads = serializers.IntegerField(min_value=0, required=False, default=0)
    IOSDownloads = serializers.IntegerField(min_value=0, required=False, default=0)
    AndroidDownloads = serializers.IntegerField(min_value=0, required=False, default=0)


class StatisticsValidator(BaseValidator):

    def statistics_filters(self, request) -> StatisticsFilters:
        vd = self.validate(StatisticsQuerySerializer, request.query_params)
        return StatisticsFilters(
            year=vd.get('year'),
            month=vd.get('month'),
            date_from=vd.get('dateFrom'),
            date_to=vd.get('dateTo'),
            past_months=vd.get('pastMonths'),
        )

    def age_filters(self, request) -> AgeFilters:
        vd = self.validate(AgeQuerySerializer, request.query_params)
        return AgeFilters(year=vd.get('year'), age_from=vd.get('ageFrom'), age_to=vd.get('ageTo'))

    def app_downloads(self, request) -> AppDownloadDomainModel:
        vd = self.validate(AppDownloadSerializer, request.data)
        return self.to_model(AppDownloadDomainModel, vd)
