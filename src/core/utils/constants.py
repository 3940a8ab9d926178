from django.db import models
from django.utils.translation import gettext_lazy as _


class RoleSlug(models.TextChoices):
    CUSTOMER = "customer", _("Customer")
    STAFF = "staff", _("Staff")
    ADMIN = "admin", _("Admin")


STAFF_ROLE_SLUGS = (RoleSlug.STAFF, RoleSlug.ADMIN)


class TicketStatus(models.TextChoices):
    OPEN = "open", _("Open")
    IN_PROGRESS = "in_progress", _("In Progress")
    RESOLVED = "resolved", _("Resolved")
    CLOSED = "closed", _("Closed")


TERMINAL_TICKET_STATUSES = frozenset({TicketStatus.RESOLVED, TicketStatus.CLOSED})
ACTIVE_TICKET_STATUSES = frozenset({TicketStatus.OPEN, TicketStatus.IN_PROGRESS})


class TicketPriority(models.TextChoices):
    LOW = "low", _("Low")
    MEDIUM = "medium", _("Medium")
    HIGH = "high", _("High")
    URGENT = "urgent", _("Urgent")


class TicketTransitionAction(models.TextChoices):
    CREATED = "created", _("Created")
    STATUS_CHANGED = "status_changed", _("Status Changed")
    RESOLVED = "resolved", _("Resolved")
    REOPENED = "reopened", _("Reopened")


class PointsEntryType(models.TextChoices):
    TICKET_RESOLVED = "ticket_resolved", _("Ticket Resolved")
    TICKET_REOPENED = "ticket_reopened", _("Ticket Reopened")
    ACHIEVEMENT_REWARD = "achievement_reward", _("Achievement Reward")
    MARKETPLACE_PURCHASE = "marketplace_purchase", _("Marketplace Purchase")
    MANUAL_AWARD = "manual_award", _("Manual Award")


class AchievementCode(models.TextChoices):
    FIRST_RESOLUTION = "first_resolution", _("First Resolution")
    RESOLUTION_MASTER = "resolution_master", _("Resolution Master")
    CUSTOMER_CHAMPION = "customer_champion", _("Customer Champion")
    LIGHTNING_FAST = "lightning_fast", _("Lightning Fast")


class LeaderboardMetric(models.TextChoices):
    POINTS = "points", _("Points")
    RESOLVED = "resolved", _("Tickets Resolved")
    SATISFACTION = "satisfaction", _("Customer Satisfaction")
    GROWTH = "growth", _("Monthly Growth")


class LeaderboardTimeframe(models.TextChoices):
    WEEK = "week", _("Week")
    MONTH = "month", _("Month")
    QUARTER = "quarter", _("Quarter")
    YEAR = "year", _("Year")


class NotificationType(models.TextChoices):
    TICKET_SUBMITTED = "ticket_submitted", _("Ticket Submitted")
    STAFF_REPLY = "staff_reply", _("Staff Reply")
    STATUS_CHANGE = "status_change", _("Status Change")
    ACHIEVEMENT_UNLOCKED = "achievement_unlocked", _("Achievement Unlocked")


STAFF_OF_THE_MONTH = "Staff of the Month"
