"""Request validators: DRF serializers plus conversion into domain models and search filters."""
