"""Wire-format serializers."""
