"""
Custom exception classes for the geographic drill-down engine.

This module defines the exception hierarchy raised by hierarchy editing,
region resolution, boundary selection, boundary upload validation and the
external data source boundary.
"""

from typing import Optional, List, Dict, Any


class GeoDrillError(Exception):
    """Base exception class for all drill-down engine errors."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None):
        """
        Initialize the base drill-down error.

        Args:
            message: Human-readable error message
            error_code: Optional error code for programmatic handling
            context: Optional context information about the error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'error_code': self.error_code,
            'context': self.context
        }


class ValidationError(GeoDrillError):
    """Exception raised for invalid values handed to the engine."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 invalid_value: Any = None, validation_rules: Optional[List[str]] = None):
        """
        Initialize validation error.

        Args:
            message: Human-readable error message
            field_name: Name of the field that failed validation
            invalid_value: The invalid value that caused the error
            validation_rules: List of validation rules that were violated
        """
        context = {
            'field_name': field_name,
            'invalid_value': str(invalid_value) if invalid_value is not None else None,
            'validation_rules': validation_rules or []
        }
        super().__init__(message, error_code='VALIDATION_ERROR', context=context)
        self.field_name = field_name
        self.invalid_value = invalid_value
        self.validation_rules = validation_rules or []


class HierarchyConfigError(ValidationError):
    """Exception raised when a geographic hierarchy breaks its invariants."""

    def __init__(self, message: str, issues: Optional[List[str]] = None,
                 country_code: Optional[str] = None):
        """
        Initialize hierarchy configuration error.

        Args:
            message: Human-readable error message
            issues: List of invariant violations found
            country_code: Country the hierarchy belongs to
        """
        super().__init__(
            message=message,
            field_name='geographic_hierarchy',
            validation_rules=['hierarchy_contiguous', 'hierarchy_type_chain',
                              'hierarchy_unique_columns']
        )
        self.error_code = 'HIERARCHY_CONFIG_ERROR'
        self.context.update({
            'issues': issues or [],
            'country_code': country_code
        })
        self.issues = issues or []
        self.country_code = country_code


class ConfigurationError(GeoDrillError):
    """Exception raised for configuration errors."""

    def __init__(self, message: str, config_key: Optional[str] = None,
                 config_value: Any = None, valid_values: Optional[List[Any]] = None):
        """
        Initialize configuration error.

        Args:
            message: Human-readable error message
            config_key: Configuration key that has invalid value
            config_value: Invalid configuration value
            valid_values: List of valid values for the configuration key
        """
        context = {
            'config_key': config_key,
            'config_value': str(config_value) if config_value is not None else None,
            'valid_values': [str(v) for v in valid_values] if valid_values else None
        }
        super().__init__(message, error_code='CONFIGURATION_ERROR', context=context)
        self.config_key = config_key
        self.config_value = config_value
        self.valid_values = valid_values or []


class RegionNotFoundError(GeoDrillError):
    """Exception raised when a region label cannot be resolved to a region."""

    def __init__(self, message: str, region_name: str,
                 expected_type: Optional[str] = None,
                 parent_id: Optional[int] = None,
                 candidate_count: int = 0):
        """
        Initialize region not found error.

        Args:
            message: Human-readable error message
            region_name: Label that failed to resolve
            expected_type: Region type the label was resolved against
            parent_id: Parent scope hint used during resolution
            candidate_count: Number of candidate regions searched
        """
        context = {
            'region_name': region_name,
            'expected_type': expected_type,
            'parent_id': parent_id,
            'candidate_count': candidate_count
        }
        super().__init__(message, error_code='REGION_NOT_FOUND', context=context)
        self.region_name = region_name
        self.expected_type = expected_type
        self.parent_id = parent_id
        self.candidate_count = candidate_count


class NoFurtherDrillDownError(GeoDrillError):
    """Informational signal that no deeper level is configured."""

    def __init__(self, message: str, current_depth: int, max_depth: int):
        context = {
            'current_depth': current_depth,
            'max_depth': max_depth
        }
        super().__init__(message, error_code='NO_FURTHER_DRILL_DOWN', context=context)
        self.current_depth = current_depth
        self.max_depth = max_depth


class BoundaryUnresolvedError(GeoDrillError):
    """Exception raised when no default boundary is flagged for a region."""

    def __init__(self, message: str, region_id: Optional[int] = None,
                 boundary_count: int = 0):
        """
        Initialize boundary unresolved error.

        Args:
            message: Human-readable error message
            region_id: Region whose boundary set has no default
            boundary_count: Number of boundaries available for selection
        """
        context = {
            'region_id': region_id,
            'boundary_count': boundary_count
        }
        super().__init__(message, error_code='BOUNDARY_UNRESOLVED', context=context)
        self.region_id = region_id
        self.boundary_count = boundary_count


class BoundaryUploadError(ValidationError):
    """Exception raised when an uploaded GeoJSON fails validation."""

    def __init__(self, message: str, join_key: Optional[str] = None,
                 missing_feature_indexes: Optional[List[int]] = None):
        """
        Initialize boundary upload error.

        Args:
            message: Human-readable error message
            join_key: Feature property expected on every feature
            missing_feature_indexes: Indexes of features lacking the join key
        """
        super().__init__(
            message=message,
            field_name='geojson_data',
            validation_rules=['feature_collection', 'join_key_present']
        )
        self.error_code = 'BOUNDARY_UPLOAD_ERROR'
        self.context.update({
            'join_key': join_key,
            'missing_feature_count': len(missing_feature_indexes or []),
            'missing_feature_indexes': (missing_feature_indexes or [])[:20]
        })
        self.join_key = join_key
        self.missing_feature_indexes = missing_feature_indexes or []


class DataSourceError(GeoDrillError):
    """Exception raised when the external data source fails."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 attempts: Optional[int] = None,
                 original_error: Optional[Exception] = None):
        """
        Initialize data source error.

        Args:
            message: Human-readable error message
            operation: Data source operation that failed
            attempts: Number of attempts made before giving up
            original_error: Original exception that caused this error
        """
        context = {
            'operation': operation,
            'attempts': attempts,
            'original_error': str(original_error) if original_error else None,
            'original_error_type': type(original_error).__name__ if original_error else None
        }
        super().__init__(message, error_code='DATA_SOURCE_ERROR', context=context)
        self.operation = operation
        self.attempts = attempts
        self.original_error = original_error


class DataLoadError(GeoDrillError):
    """Exception raised for data loading errors."""

    def __init__(self, message: str, file_path: Optional[str] = None,
                 missing_columns: Optional[List[str]] = None,
                 original_error: Optional[Exception] = None):
        """
        Initialize data load error.

        Args:
            message: Human-readable error message
            file_path: Path to the file that caused the error
            missing_columns: Required columns absent from the file
            original_error: Original exception that caused this error
        """
        context = {
            'file_path': file_path,
            'missing_columns': missing_columns or [],
            'original_error': str(original_error) if original_error else None,
            'original_error_type': type(original_error).__name__ if original_error else None
        }
        super().__init__(message, error_code='DATA_LOAD_ERROR', context=context)
        self.file_path = file_path
        self.missing_columns = missing_columns or []
        self.original_error = original_error


# Utility functions for exception handling

def create_region_not_found_error(region_name: str, expected_type: Optional[str] = None,
                                  parent_id: Optional[int] = None,
                                  candidate_count: int = 0) -> RegionNotFoundError:
    """
    Create a standardized region not found error.

    Args:
        region_name: Label that failed to resolve
        expected_type: Region type the label was resolved against
        parent_id: Parent scope hint used during resolution
        candidate_count: Number of candidate regions searched

    Returns:
        RegionNotFoundError instance
    """
    message = f'Region "{region_name}" not found'
    if expected_type:
        message += f" among {expected_type} regions"
    if parent_id is not None:
        message += f" under parent {parent_id}"

    return RegionNotFoundError(
        message=message,
        region_name=region_name,
        expected_type=expected_type,
        parent_id=parent_id,
        candidate_count=candidate_count
    )


def create_hierarchy_config_error(issues: List[str],
                                  country_code: Optional[str] = None) -> HierarchyConfigError:
    """
    Create a standardized hierarchy configuration error.

    Args:
        issues: List of invariant violations
        country_code: Country the hierarchy belongs to

    Returns:
        HierarchyConfigError instance
    """
    message = f"Geographic hierarchy is invalid: {'; '.join(issues)}"
    return HierarchyConfigError(message=message, issues=issues, country_code=country_code)


def is_recoverable_error(error: Exception) -> bool:
    """
    Determine if an error is recoverable.

    Args:
        error: Exception to check

    Returns:
        True if the error is potentially recoverable, False otherwise
    """
    # Transport failures are worth a retry
    if isinstance(error, (DataSourceError, ConnectionError, TimeoutError)):
        return True

    # The user can pick another region or boundary
    if isinstance(error, (RegionNotFoundError, BoundaryUnresolvedError,
                          NoFurtherDrillDownError)):
        return True

    if isinstance(error, (ConfigurationError, HierarchyConfigError, BoundaryUploadError)):
        return False

    return True


def get_error_severity(error: Exception) -> str:
    """
    Get the severity level of an error.

    Args:
        error: Exception to evaluate

    Returns:
        Severity level string (low, medium, high, critical)
    """
    if isinstance(error, ConfigurationError):
        return 'critical'
    elif isinstance(error, (DataLoadError, DataSourceError)):
        return 'high'
    elif isinstance(error, (HierarchyConfigError, BoundaryUploadError)):
        return 'medium'
    elif isinstance(error, (RegionNotFoundError, BoundaryUnresolvedError, ValidationError)):
        return 'low'
    elif isinstance(error, NoFurtherDrillDownError):
        return 'low'
    else:
        return 'medium'
