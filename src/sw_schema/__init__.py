from sw_schema.exceptions import (
    BadArgumentException,
    FromSchemaMissingError,
    InvalidFieldError,
    InvalidSchemaError,
    LoadFromFileException,
    NoDeclaredFieldsError,
    SchemaException,
    ToSchemaMissingError,
)
from sw_schema.metadata import WHOLE_OBJECT, MetadataStorage, Rule, RuleMetadata, get_metadata_storage
from sw_schema.sanitization import (
    Blacklist,
    Escape,
    LTrim,
    RTrim,
    SanitizeNested,
    Sanitizer,
    StripLow,
    ToBoolean,
    ToDate,
    ToFloat,
    ToInt,
    ToLowerCase,
    ToString,
    ToUpperCase,
    Trim,
    Whitelist,
    sanitize,
)
from sw_schema.schema import FieldDeclaration, FieldKind, NonListPolicy, Schema, SchemaOptions
from sw_schema.validation import (
    ArrayContains,
    ArrayMaxSize,
    ArrayMinSize,
    ArrayNotContains,
    ArrayNotEmpty,
    ArrayUnique,
    Constraint,
    Contains,
    Equals,
    IsAlpha,
    IsAlphanumeric,
    IsArray,
    IsAscii,
    IsBoolean,
    IsDatable,
    IsDate,
    IsDefined,
    IsDivisibleBy,
    IsEmail,
    IsEmpty,
    IsFQDN,
    IsIn,
    IsInt,
    IsIP,
    IsJSON,
    IsLowercase,
    IsNegative,
    IsNotEmpty,
    IsNotIn,
    IsNumber,
    IsOptional,
    IsPositive,
    IsString,
    IsUppercase,
    IsURL,
    IsUUID,
    Length,
    Matches,
    Max,
    MaxDate,
    MaxLength,
    Min,
    MinDate,
    MinLength,
    NotContains,
    NotEquals,
    RawView,
    Strict,
    ValidateIf,
    ValidateNested,
    ValidationArguments,
    ValidationError,
    ValidatorOptions,
    conditions_met,
    validate,
)
