from accounts.models import FelicityUser

ORGANIZER_ROLES = (FelicityUser.Role.ORGANIZER, FelicityUser.Role.ADMIN)
