"""XML-RPC element names and fixed document paths."""

METHOD_CALL = "methodCall"
METHOD_NAME = "methodName"
METHOD_RESPONSE = "methodResponse"
PARAMS = "params"
PARAM = "param"
VALUE = "value"
INT = "int"
I4 = "i4"
BOOLEAN = "boolean"
STRING = "string"
DOUBLE = "double"
DATETIME = "dateTime.iso8601"
BASE64 = "base64"
STRUCT = "struct"
MEMBER = "member"
NAME = "name"
ARRAY = "array"
DATA = "data"
FAULT = "fault"
FAULT_CODE = "faultCode"
FAULT_STRING = "faultString"

RESPONSE_VALUE_PATH = "methodResponse/params/param/value"
RESPONSE_FAULT_PATH = "methodResponse/fault"
ARRAY_VALUE_PATH = "data/value"
FAULT_MEMBERS_PATH = "value/struct/member"
