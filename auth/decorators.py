from functools import wraps
import inspect
import logging
from typing import Optional, List
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from auth.models import AuthenticatedUser, ValidatedUser
from entities.user import User
from common.exceptions import AuthorizationException, BaseReportingException
from common.logging import log_security_event, user_id_var
from dependencies import AuthServiceDep

logger = logging.getLogger(__name__)
security = HTTPBearer()

async def get_current_active_user(
    auth_service: AuthServiceDep,
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> AuthenticatedUser:
    user = await auth_service.get_current_user(credentials.credentials)
    user_id_var.set(user.id)
    return AuthenticatedUser(user.id, user.email, user.model_dump())

def authorize(
    allowed_roles: Optional[List[str]] = None,
    required_page: Optional[str] = None,
    check_active: bool = True
):
    """
    Authorization decorator using fastapi-decorators pattern.

    Usage:
    @authorize(allowed_roles=["admin", "manager"], required_page="/reports")
    def my_endpoint(report_id: str, current_user: ValidatedUser):
        # current_user is automatically injected and validated
        pass

    Page access follows the user's explicit permissions and is granted when
    no permission has been recorded for the page.
    """
    def create_dependency():
        def auth_dependency(
            current_user: AuthenticatedUser = Depends(get_current_active_user)
        ) -> ValidatedUser:
            try:
                user = User.model_validate(current_user.user_data)

                if check_active and not user.is_active:
                    logger.warning(f"Inactive user blocked: {user.email}")
                    raise AuthorizationException(
                        detail="Your account has been deactivated. Please contact support.",
                        error_code="ACCOUNT_DEACTIVATED"
                    )

                logger.debug(f"Role validation: user_role='{user.role}', required={allowed_roles}")
                if allowed_roles and not user.has_role_access(allowed_roles):
                    log_security_event(
                        "ROLE_ACCESS_DENIED",
                        user_id=user.id,
                        details={"role": user.role, "allowed_roles": allowed_roles}
                    )
                    raise AuthorizationException(detail="Access denied.")

                if required_page and not user.has_page_access(required_page):
                    log_security_event(
                        "PAGE_ACCESS_DENIED",
                        user_id=user.id,
                        details={"page": required_page}
                    )
                    raise AuthorizationException(detail="Access denied.", error_code="PAGE_ACCESS_DENIED")

                return ValidatedUser(current_user.id, current_user.email, current_user.user_data)

            except BaseReportingException:
                raise
            except Exception as e:
                logger.error(f"Authorization error: {e}", exc_info=True)
                raise AuthorizationException(detail="Authorization failed", error_code="AUTHORIZATION_FAILED")

        return auth_dependency
    def decorator(func):
        sig = inspect.signature(func)
        expects_current_user = 'current_user' in sig.parameters

        # Prepare dependency once
        dependency = Depends(create_dependency())

        if expects_current_user:
            # Expose `current_user` as a FastAPI dependency parameter
            @wraps(func)
            async def wrapper(*args, current_user: ValidatedUser = dependency, **kwargs):
                if inspect.iscoroutinefunction(func):
                    return await func(*args, current_user=current_user, **kwargs)
                else:
                    return func(*args, current_user=current_user, **kwargs)

            # Replace only the `current_user` parameter to be a dependency
            new_params = []
            for name, p in sig.parameters.items():
                if name == 'current_user':
                    p = p.replace(default=dependency, annotation=ValidatedUser)
                new_params.append(p)
            wrapper.__signature__ = sig.replace(parameters=tuple(new_params))
            return wrapper
        else:
            # Inject dependency without exposing it as a real request parameter
            @wraps(func)
            async def wrapper(*args, _validated_user: ValidatedUser = dependency, **kwargs):
                if inspect.iscoroutinefunction(func):
                    return await func(*args, **kwargs)
                else:
                    return func(*args, **kwargs)

            # Add a hidden keyword-only dependency parameter to the signature
            params = list(sig.parameters.values())
            # Insert before **kwargs if present, otherwise append
            var_kw_index = next((i for i, p in enumerate(params) if p.kind == inspect.Parameter.VAR_KEYWORD), None)
            hidden_param = inspect.Parameter(
                name="_validated_user",
                kind=inspect.Parameter.POSITIONAL_OR_KEYWORD,
                default=dependency,
                annotation=ValidatedUser,
            )
            if var_kw_index is not None:
                params.insert(var_kw_index, hidden_param)
            else:
                params.append(hidden_param)
            wrapper.__signature__ = sig.replace(parameters=tuple(params))
            return wrapper

    return decorator
