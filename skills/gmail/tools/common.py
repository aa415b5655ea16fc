"""Schema fragments shared by several tools."""

ACCOUNT_PROPERTY = {
  "type": "string",
  "format": "email",
  "description": "Gmail account to use (defaults to default account)",
}

ADDRESS_LIST_PROPERTY = {
  "type": "array",
  "items": {"type": "string", "format": "email"},
}
