"""Shared constants: cookie names and route paths."""

AUTH_TOKEN_COOKIE = "auth-token"
AUTH_USERNAME_COOKIE = "auth-username"
TEMP_2FA_SECRET_COOKIE = "temp-2fa-secret"  # presence-only marker

# Cookies cleared on logout / forced logout
AUTH_COOKIES = (AUTH_TOKEN_COOKIE, AUTH_USERNAME_COOKIE, TEMP_2FA_SECRET_COOKIE)

HOME_PATH = "/"
LOGIN_PATH = "/auth/login"
SETUP_2FA_PATH = "/auth/2fa-setup"
VERIFY_2FA_PATH = "/auth/2fa-verify"

AUTH_PAGES = (LOGIN_PATH, SETUP_2FA_PATH, VERIFY_2FA_PATH)

# Paths the route guard never inspects
QUICK_EXIT_PREFIXES = ("/api/", "/_next/", "/static/", "/.well-known/")
QUICK_EXIT_PATHS = ("/api", "/favicon.ico")
STATIC_EXTENSIONS = (".jpg", ".jpeg", ".gif", ".png", ".svg", ".ico", ".webp", ".css", ".js")
