from fastapi import APIRouter, Depends, status

from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.catalog.app.command.create_customer_use_case import CreateCustomerUseCase
from lodgetix.service.catalog.app.command.update_customer_use_case import UpdateCustomerUseCase
from lodgetix.service.catalog.app.query.get_customer_use_case import GetCustomerUseCase
from lodgetix.service.catalog.domain.entity.customer_entity import CustomerEntity
from lodgetix.service.catalog.driving_adapter.http_controller.schema.customer_schema import (
    CustomerCreateRequest,
    CustomerIdResponse,
    CustomerResponse,
    CustomerUpdateRequest,
)
from lodgetix.service.reservation.app.dto import AuthUser
from lodgetix.service.reservation.driving_adapter.http_controller.client_dependency import (
    get_current_user,
)


router = APIRouter()


def to_customer_response(customer: CustomerEntity) -> CustomerResponse:
    return CustomerResponse(
        id=customer.id or '',
        user_id=customer.user_id,
        email=customer.email,
        first_name=customer.first_name,
        last_name=customer.last_name,
        phone=customer.phone,
        business_name=customer.business_name,
        address_line1=customer.address_line1,
        address_line2=customer.address_line2,
        city=customer.city,
        state=customer.state,
        postal_code=customer.postal_code,
        country=customer.country,
        created_at=customer.created_at,
        updated_at=customer.updated_at,
    )


@router.get('/me', status_code=status.HTTP_200_OK)
@Logger.io
async def get_my_customer(
    current_user: AuthUser = Depends(get_current_user),
    use_case: GetCustomerUseCase = Depends(GetCustomerUseCase.depends),
) -> CustomerResponse:
    customer = await use_case.get_for_user(user_id=current_user.id)
    return to_customer_response(customer)


@router.get('/me/id', status_code=status.HTTP_200_OK)
@Logger.io
async def get_my_customer_id(
    current_user: AuthUser = Depends(get_current_user),
    use_case: GetCustomerUseCase = Depends(GetCustomerUseCase.depends),
) -> CustomerIdResponse:
    customer_id = await use_case.get_customer_id_for_user(user_id=current_user.id)
    return CustomerIdResponse(customer_id=customer_id)


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_customer(
    request: CustomerCreateRequest,
    current_user: AuthUser = Depends(get_current_user),
    use_case: CreateCustomerUseCase = Depends(CreateCustomerUseCase.depends),
) -> CustomerResponse:
    customer = await use_case.create(user_id=current_user.id, profile=request.model_dump())
    return to_customer_response(customer)


@router.patch('/{customer_id}', status_code=status.HTTP_200_OK)
@Logger.io
async def update_customer(
    customer_id: str,
    request: CustomerUpdateRequest,
    current_user: AuthUser = Depends(get_current_user),
    use_case: UpdateCustomerUseCase = Depends(UpdateCustomerUseCase.depends),
) -> CustomerResponse:
    customer = await use_case.update(
        customer_id=customer_id,
        user_id=current_user.id,
        changes=request.model_dump(exclude_unset=True),
    )
    return to_customer_response(customer)
