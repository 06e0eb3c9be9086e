# Models package - database models
from leadtracker.models.user import User, Role
from leadtracker.models.lead import Lead, LeadStatus, LeadSource
from leadtracker.models.api_key import ApiKey
