from .permissions import (
    ASSIGNABLE_ROLES,
    PUBLISH_LEVELS,
    ROLE_POLICIES,
    Action,
    EntityType,
    Role,
    RolePolicy,
    allowed_actions,
    assignable_roles,
    can,
    can_all,
    can_any,
    can_publish_at,
)
from .config import FailureRoute, LogLevel, ResolverConfig, load_config_from_env
from .exceptions import (
    ConfigurationError,
    InvalidAssignmentError,
    NotFoundError,
    ResolutionFailure,
    TenantGraphError,
    TenantScopeError,
)
from .models import (
    AccessLevel,
    AgencyScope,
    ClientScope,
    NavigationContext,
    ProjectManager,
    ResourceKind,
    SharedResource,
    SystemScope,
    Tenant,
    TenantKind,
    User,
)
from .graph import TenantGraph
from .scope import Scope, is_in_scope, scope_of
from .visibility import VisibilityPredicate, filter_visible, sort_visible, visible_predicate
from .suspension import blocking_reason, is_blocked
from .landing import Route, RouteName, default_route
from .authorization import Decision, DenyReason, authorize
from .interfaces import (
    DecisionEvent,
    DecisionSink,
    FailureEvent,
    LoggingDecisionSink,
    SharedResourceStore,
    TenantStore,
)
from .project_managers import ClientAssignment, ProjectManagerAssignments
from .records import ProjectManagerRecord, SharedResourceRecord, TenantRecord, UserRecord
from .resolver import AccessResolver
from .logging import (
    ResolverFormatter,
    ResolverLoggerAdapter,
    get_resolver_logger,
    mask_email,
    safe_preview,
    setup_logging,
)

__all__ = [
    'ASSIGNABLE_ROLES',
    'PUBLISH_LEVELS',
    'ROLE_POLICIES',
    'AccessLevel',
    'AccessResolver',
    'Action',
    'AgencyScope',
    'ClientAssignment',
    'ClientScope',
    'ConfigurationError',
    'Decision',
    'DecisionEvent',
    'DecisionSink',
    'DenyReason',
    'EntityType',
    'FailureEvent',
    'FailureRoute',
    'InvalidAssignmentError',
    'LogLevel',
    'LoggingDecisionSink',
    'NavigationContext',
    'NotFoundError',
    'ProjectManager',
    'ProjectManagerAssignments',
    'ProjectManagerRecord',
    'ResolutionFailure',
    'ResolverConfig',
    'ResolverFormatter',
    'ResolverLoggerAdapter',
    'ResourceKind',
    'Role',
    'RolePolicy',
    'Route',
    'RouteName',
    'Scope',
    'SharedResource',
    'SharedResourceRecord',
    'SharedResourceStore',
    'SystemScope',
    'Tenant',
    'TenantGraph',
    'TenantGraphError',
    'TenantKind',
    'TenantRecord',
    'TenantScopeError',
    'TenantStore',
    'User',
    'UserRecord',
    'VisibilityPredicate',
    'allowed_actions',
    'assignable_roles',
    'authorize',
    'blocking_reason',
    'can',
    'can_all',
    'can_any',
    'can_publish_at',
    'default_route',
    'filter_visible',
    'get_resolver_logger',
    'is_blocked',
    'is_in_scope',
    'load_config_from_env',
    'mask_email',
    'safe_preview',
    'scope_of',
    'setup_logging',
    'sort_visible',
    'visible_predicate',
]
