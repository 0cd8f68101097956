from app.schemas.primitives import Measurement
from app.schemas.auth import RegisterRequest, LoginRequest, TokenResponse
from app.schemas.quotes import QuoteCreateRequest
from app.schemas.payments import MpesaPayRequest, MpesaPayResponse
