# agroshop/api/responses.py
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

# komunikaty 400 per endpoint, zgodne z dotychczasowym frontendem
VALIDATION_MESSAGES = {
    ("POST", "/api/cart/add"): "Missing or invalid uid/productId",
    ("PATCH", "/api/cart/update-quantity"): "Invalid input",
    ("DELETE", "/api/cart/remove"): "Missing data",
    ("POST", "/api/cart/place-order"): "Invalid order data",
    ("POST", "/api/user/create"): "Missing fields",
    ("POST", "/api/user/merge-cart"): "Invalid payload",
    ("PATCH", "/api/user/set-field"): "Invalid payload",
    ("POST", "/api/user/favorites/toggle"): "Missing or invalid uid/productId",
    ("POST", "/api/products/upload"): "Missing token or products",
}


def fail(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = VALIDATION_MESSAGES.get((request.method, request.url.path), "Invalid input")
    return fail(400, message)
