from django.shortcuts import redirect
from django.conf import settings
from django.contrib import messages
from django.urls import resolve, Resolver404
from django.utils.deprecation import MiddlewareMixin

class LoginRequiredMessageMiddleware(MiddlewareMixin):
    """
    Middleware: Nếu chưa đăng nhập và truy cập trang nhập phiếu, sẽ redirect về login kèm message.
    """
    allowed_names = ['login', 'logout']

    def process_view(self, request, view_func, view_args, view_kwargs):
        # Không áp dụng cho login, logout, trang admin và static
        login_url = getattr(settings, 'LOGIN_URL', '/login/')
        try:
            match = resolve(request.path)
        except Resolver404:
            return None
        if match.url_name in self.allowed_names or match.app_name == 'admin':
            return None
        if request.path.startswith('/' + settings.STATIC_URL.lstrip('/')):
            return None
        # Nếu chưa đăng nhập
        if not request.user.is_authenticated:
            if request.headers.get('x-requested-with') != 'XMLHttpRequest':
                messages.warning(request, 'Bạn cần đăng nhập để truy cập chức năng này!')
            return redirect(f"{login_url}?next={request.path}")
        return None
