# =============================================================================
# core/ - Domain Models and Services
# =============================================================================
# - models/: Pydantic request schemas and enums
# - services/: Business logic over the MongoDB collections
# =============================================================================
