"""
Canonical venue permission catalog and system role definitions.

These constants are the seed data for VenuePermission rows and for the
system roles every venue receives on creation.
"""
from enum import Enum, IntEnum


class PermissionCategory(str, Enum):
    STAFF = 'staff'
    EVENTS = 'events'
    BOOKINGS = 'bookings'
    ANALYTICS = 'analytics'
    SETTINGS = 'settings'
    DOCUMENTS = 'documents'
    PAYROLL = 'payroll'
    COMMUNICATIONS = 'communications'
    ADMIN = 'admin'


class RoleLevel(IntEnum):
    """Authority level of a role. Higher means more authority."""
    ENTRY = 1
    MID = 2
    SENIOR = 3
    MANAGER = 4
    ADMIN = 5


class PermissionName(str, Enum):
    # Staff management
    STAFF_VIEW = 'staff.view'
    STAFF_CREATE = 'staff.create'
    STAFF_EDIT = 'staff.edit'
    STAFF_DELETE = 'staff.delete'
    STAFF_MANAGE_ROLES = 'staff.manage_roles'
    STAFF_VIEW_SENSITIVE = 'staff.view_sensitive'
    STAFF_MANAGE_PERFORMANCE = 'staff.manage_performance'
    STAFF_MANAGE_CERTIFICATIONS = 'staff.manage_certifications'

    # Events
    EVENTS_VIEW = 'events.view'
    EVENTS_CREATE = 'events.create'
    EVENTS_EDIT = 'events.edit'
    EVENTS_DELETE = 'events.delete'
    EVENTS_MANAGE_STAFF = 'events.manage_staff'
    EVENTS_MANAGE_SCHEDULE = 'events.manage_schedule'
    EVENTS_VIEW_FINANCIAL = 'events.view_financial'
    EVENTS_MANAGE_FINANCIAL = 'events.manage_financial'

    # Bookings
    BOOKINGS_VIEW = 'bookings.view'
    BOOKINGS_CREATE = 'bookings.create'
    BOOKINGS_EDIT = 'bookings.edit'
    BOOKINGS_DELETE = 'bookings.delete'
    BOOKINGS_APPROVE = 'bookings.approve'
    BOOKINGS_MANAGE_CONTRACTS = 'bookings.manage_contracts'

    # Analytics
    ANALYTICS_VIEW = 'analytics.view'
    ANALYTICS_VIEW_FINANCIAL = 'analytics.view_financial'
    ANALYTICS_VIEW_STAFF = 'analytics.view_staff'
    ANALYTICS_EXPORT = 'analytics.export'
    ANALYTICS_MANAGE_DASHBOARDS = 'analytics.manage_dashboards'

    # Settings
    SETTINGS_VIEW = 'settings.view'
    SETTINGS_EDIT_BASIC = 'settings.edit_basic'
    SETTINGS_EDIT_ADVANCED = 'settings.edit_advanced'
    SETTINGS_MANAGE_INTEGRATIONS = 'settings.manage_integrations'
    SETTINGS_MANAGE_BILLING = 'settings.manage_billing'

    # Documents
    DOCUMENTS_VIEW = 'documents.view'
    DOCUMENTS_UPLOAD = 'documents.upload'
    DOCUMENTS_EDIT = 'documents.edit'
    DOCUMENTS_DELETE = 'documents.delete'
    DOCUMENTS_MANAGE_CATEGORIES = 'documents.manage_categories'

    # Payroll
    PAYROLL_VIEW = 'payroll.view'
    PAYROLL_EDIT = 'payroll.edit'
    PAYROLL_PROCESS = 'payroll.process'
    PAYROLL_VIEW_TAX_INFO = 'payroll.view_tax_info'
    PAYROLL_MANAGE_RATES = 'payroll.manage_rates'

    # Communications
    COMMUNICATIONS_VIEW = 'communications.view'
    COMMUNICATIONS_SEND = 'communications.send'
    COMMUNICATIONS_BROADCAST = 'communications.broadcast'
    COMMUNICATIONS_MANAGE_TEMPLATES = 'communications.manage_templates'
    COMMUNICATIONS_VIEW_PRIVATE = 'communications.view_private'

    # Administration
    ADMIN_MANAGE_ROLES = 'admin.manage_roles'
    ADMIN_MANAGE_USERS = 'admin.manage_users'
    ADMIN_VIEW_AUDIT_LOGS = 'admin.view_audit_logs'
    ADMIN_SYSTEM_SETTINGS = 'admin.system_settings'
    ADMIN_DATA_EXPORT = 'admin.data_export'

    @property
    def category(self):
        return PermissionCategory(self.value.split('.', 1)[0])

    @property
    def label(self):
        action = self.value.split('.', 1)[1].replace('_', ' ')
        return f"{action.capitalize()} ({self.category.value})"


class SystemRoleName(str, Enum):
    VENUE_OWNER = 'Venue Owner'
    VENUE_MANAGER = 'Venue Manager'
    EVENT_COORDINATOR = 'Event Coordinator'
    STAFF_SUPERVISOR = 'Staff Supervisor'
    FOH_MANAGER = 'FOH Manager'
    TECHNICAL_MANAGER = 'Technical Manager'
    SECURITY_MANAGER = 'Security Manager'
    BAR_MANAGER = 'Bar Manager'
    KITCHEN_MANAGER = 'Kitchen Manager'
    SENIOR_STAFF = 'Senior Staff'
    STAFF_MEMBER = 'Staff Member'
    TEMPORARY_STAFF = 'Temporary Staff'
    VIEWER = 'Viewer'


P = PermissionName

PERMISSION_DESCRIPTIONS = {
    P.STAFF_VIEW: 'View the venue staff directory',
    P.STAFF_CREATE: 'Add staff members to the venue',
    P.STAFF_EDIT: 'Edit staff member profiles',
    P.STAFF_DELETE: 'Remove staff members from the venue',
    P.STAFF_MANAGE_ROLES: 'Assign and remove staff roles',
    P.STAFF_VIEW_SENSITIVE: 'View sensitive staff information',
    P.STAFF_MANAGE_PERFORMANCE: 'Record and review staff performance',
    P.STAFF_MANAGE_CERTIFICATIONS: 'Manage staff certifications',
    P.EVENTS_VIEW: 'View venue events',
    P.EVENTS_CREATE: 'Create events',
    P.EVENTS_EDIT: 'Edit events',
    P.EVENTS_DELETE: 'Delete events',
    P.EVENTS_MANAGE_STAFF: 'Staff events',
    P.EVENTS_MANAGE_SCHEDULE: 'Manage event schedules',
    P.EVENTS_VIEW_FINANCIAL: 'View event financials',
    P.EVENTS_MANAGE_FINANCIAL: 'Manage event financials',
    P.BOOKINGS_VIEW: 'View bookings',
    P.BOOKINGS_CREATE: 'Create bookings',
    P.BOOKINGS_EDIT: 'Edit bookings',
    P.BOOKINGS_DELETE: 'Delete bookings',
    P.BOOKINGS_APPROVE: 'Approve booking requests',
    P.BOOKINGS_MANAGE_CONTRACTS: 'Manage booking contracts',
    P.ANALYTICS_VIEW: 'View venue analytics',
    P.ANALYTICS_VIEW_FINANCIAL: 'View financial analytics',
    P.ANALYTICS_VIEW_STAFF: 'View staff analytics',
    P.ANALYTICS_EXPORT: 'Export analytics data',
    P.ANALYTICS_MANAGE_DASHBOARDS: 'Manage analytics dashboards',
    P.SETTINGS_VIEW: 'View venue settings',
    P.SETTINGS_EDIT_BASIC: 'Edit basic venue settings',
    P.SETTINGS_EDIT_ADVANCED: 'Edit advanced venue settings',
    P.SETTINGS_MANAGE_INTEGRATIONS: 'Manage venue integrations',
    P.SETTINGS_MANAGE_BILLING: 'Manage venue billing',
    P.DOCUMENTS_VIEW: 'View venue documents',
    P.DOCUMENTS_UPLOAD: 'Upload documents',
    P.DOCUMENTS_EDIT: 'Edit documents',
    P.DOCUMENTS_DELETE: 'Delete documents',
    P.DOCUMENTS_MANAGE_CATEGORIES: 'Manage document categories',
    P.PAYROLL_VIEW: 'View payroll',
    P.PAYROLL_EDIT: 'Edit payroll entries',
    P.PAYROLL_PROCESS: 'Process payroll runs',
    P.PAYROLL_VIEW_TAX_INFO: 'View staff tax information',
    P.PAYROLL_MANAGE_RATES: 'Manage pay rates',
    P.COMMUNICATIONS_VIEW: 'View venue communications',
    P.COMMUNICATIONS_SEND: 'Send messages',
    P.COMMUNICATIONS_BROADCAST: 'Broadcast messages to all staff',
    P.COMMUNICATIONS_MANAGE_TEMPLATES: 'Manage message templates',
    P.COMMUNICATIONS_VIEW_PRIVATE: 'View private communications',
    P.ADMIN_MANAGE_ROLES: 'Create, edit and delete roles',
    P.ADMIN_MANAGE_USERS: 'Manage user permission overrides',
    P.ADMIN_VIEW_AUDIT_LOGS: 'View the permission audit log',
    P.ADMIN_SYSTEM_SETTINGS: 'Change system settings',
    P.ADMIN_DATA_EXPORT: 'Export venue data',
}

ALL_PERMISSIONS = 'ALL'

_DEPARTMENT_MANAGER_PERMISSIONS = [
    P.STAFF_VIEW, P.STAFF_EDIT, P.STAFF_MANAGE_PERFORMANCE,
    P.EVENTS_VIEW, P.EVENTS_MANAGE_STAFF,
    P.ANALYTICS_VIEW, P.ANALYTICS_VIEW_STAFF,
    P.PAYROLL_VIEW, P.PAYROLL_EDIT,
    P.COMMUNICATIONS_VIEW, P.COMMUNICATIONS_SEND,
]

_FRONTLINE_PERMISSIONS = [
    P.STAFF_VIEW,
    P.EVENTS_VIEW,
    P.COMMUNICATIONS_VIEW, P.COMMUNICATIONS_SEND,
]

# System role -> (level, description, permissions)
SYSTEM_ROLES = {
    SystemRoleName.VENUE_OWNER: {
        'level': RoleLevel.ADMIN,
        'description': 'Full access to every venue feature and setting',
        'permissions': ALL_PERMISSIONS,
    },
    SystemRoleName.VENUE_MANAGER: {
        'level': RoleLevel.ADMIN,
        'description': 'Runs day-to-day venue operations',
        'permissions': [
            P.STAFF_VIEW, P.STAFF_CREATE, P.STAFF_EDIT, P.STAFF_MANAGE_ROLES,
            P.STAFF_VIEW_SENSITIVE, P.STAFF_MANAGE_PERFORMANCE, P.STAFF_MANAGE_CERTIFICATIONS,
            P.EVENTS_VIEW, P.EVENTS_CREATE, P.EVENTS_EDIT, P.EVENTS_MANAGE_STAFF,
            P.EVENTS_MANAGE_SCHEDULE, P.EVENTS_VIEW_FINANCIAL,
            P.BOOKINGS_VIEW, P.BOOKINGS_CREATE, P.BOOKINGS_EDIT, P.BOOKINGS_APPROVE,
            P.BOOKINGS_MANAGE_CONTRACTS,
            P.ANALYTICS_VIEW, P.ANALYTICS_VIEW_FINANCIAL, P.ANALYTICS_VIEW_STAFF, P.ANALYTICS_EXPORT,
            P.SETTINGS_VIEW, P.SETTINGS_EDIT_BASIC, P.SETTINGS_EDIT_ADVANCED,
            P.DOCUMENTS_VIEW, P.DOCUMENTS_UPLOAD, P.DOCUMENTS_EDIT, P.DOCUMENTS_MANAGE_CATEGORIES,
            P.PAYROLL_VIEW, P.PAYROLL_EDIT, P.PAYROLL_MANAGE_RATES,
            P.COMMUNICATIONS_VIEW, P.COMMUNICATIONS_SEND, P.COMMUNICATIONS_BROADCAST,
            P.COMMUNICATIONS_MANAGE_TEMPLATES,
        ],
    },
    SystemRoleName.EVENT_COORDINATOR: {
        'level': RoleLevel.MANAGER,
        'description': 'Plans events and handles bookings',
        'permissions': [
            P.STAFF_VIEW, P.STAFF_EDIT,
            P.EVENTS_VIEW, P.EVENTS_CREATE, P.EVENTS_EDIT, P.EVENTS_MANAGE_STAFF,
            P.EVENTS_MANAGE_SCHEDULE,
            P.BOOKINGS_VIEW, P.BOOKINGS_CREATE, P.BOOKINGS_EDIT, P.BOOKINGS_APPROVE,
            P.ANALYTICS_VIEW,
            P.DOCUMENTS_VIEW, P.DOCUMENTS_UPLOAD, P.DOCUMENTS_EDIT,
            P.COMMUNICATIONS_VIEW, P.COMMUNICATIONS_SEND,
        ],
    },
    SystemRoleName.STAFF_SUPERVISOR: {
        'level': RoleLevel.MANAGER,
        'description': 'Supervises shifts and staff performance',
        'permissions': _DEPARTMENT_MANAGER_PERMISSIONS,
    },
    SystemRoleName.FOH_MANAGER: {
        'level': RoleLevel.MANAGER,
        'description': 'Manages front-of-house staff',
        'permissions': _DEPARTMENT_MANAGER_PERMISSIONS,
    },
    SystemRoleName.TECHNICAL_MANAGER: {
        'level': RoleLevel.MANAGER,
        'description': 'Manages production and technical crew',
        'permissions': _DEPARTMENT_MANAGER_PERMISSIONS,
    },
    SystemRoleName.SECURITY_MANAGER: {
        'level': RoleLevel.MANAGER,
        'description': 'Manages the security team',
        'permissions': _DEPARTMENT_MANAGER_PERMISSIONS,
    },
    SystemRoleName.BAR_MANAGER: {
        'level': RoleLevel.MANAGER,
        'description': 'Manages bar staff',
        'permissions': _DEPARTMENT_MANAGER_PERMISSIONS,
    },
    SystemRoleName.KITCHEN_MANAGER: {
        'level': RoleLevel.MANAGER,
        'description': 'Manages kitchen staff',
        'permissions': _DEPARTMENT_MANAGER_PERMISSIONS,
    },
    SystemRoleName.SENIOR_STAFF: {
        'level': RoleLevel.SENIOR,
        'description': 'Experienced staff with analytics visibility',
        'permissions': [
            P.STAFF_VIEW,
            P.EVENTS_VIEW,
            P.ANALYTICS_VIEW,
            P.COMMUNICATIONS_VIEW, P.COMMUNICATIONS_SEND,
        ],
    },
    SystemRoleName.STAFF_MEMBER: {
        'level': RoleLevel.MID,
        'description': 'Regular venue staff',
        'permissions': _FRONTLINE_PERMISSIONS,
    },
    SystemRoleName.TEMPORARY_STAFF: {
        'level': RoleLevel.ENTRY,
        'description': 'Short-term or casual staff',
        'permissions': _FRONTLINE_PERMISSIONS,
    },
    SystemRoleName.VIEWER: {
        'level': RoleLevel.ENTRY,
        'description': 'Read-only access to staff and events',
        'permissions': [P.STAFF_VIEW, P.EVENTS_VIEW],
    },
}


def permissions_for_system_role(role_name):
    """
    Return the default permission names of a system role.

    Accepts a SystemRoleName or its display string. Unknown names yield
    an empty list.
    """
    try:
        role = SystemRoleName(role_name)
    except ValueError:
        return []

    permissions = SYSTEM_ROLES[role]['permissions']
    if permissions == ALL_PERMISSIONS:
        return [permission.value for permission in PermissionName]
    return [permission.value for permission in permissions]
