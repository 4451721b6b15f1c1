import logging
from django.conf import settings
from django.contrib import messages
from django.contrib.auth import authenticate, login, logout
from django.contrib.auth.decorators import login_required
from django.core.cache import cache
from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.shortcuts import render, redirect
from django.urls import reverse
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_GET, require_POST
from .exceptions import PersistenceError
from .models import Account
from .storage import SessionStorage
from .tally import TallyStore, STORAGE_KEY
from .thong_ke import tinh_thong_ke
from . import lan_nhap

logger = logging.getLogger(__name__)

# Khoá trong session / cache
NGUOI_NHAP_KEY = 'nguoi_nhap_id'
LOAI_TRU_KEY = 'loai_tru'
TONG_HOP_CACHE_KEY = 'tong_hop_gan_nhat'
# Số phiếu tối đa cho một lần điều chỉnh
GIOI_HAN_DELTA = 1000000


def is_ajax(request):
	return request.headers.get('x-requested-with') == 'XMLHttpRequest'

def tra_loi(request, message, redirect_to, success=True, level=messages.SUCCESS, status=200, **extra):
	"""
	AJAX thì trả JSON, còn lại thì gắn message và chuyển hướng.
	"""
	if is_ajax(request):
		data = {'success': success, 'message': message, 'redirect_url': reverse(redirect_to)}
		data.update(extra)
		return JsonResponse(data, status=status)
	messages.add_message(request, level, message)
	return redirect(redirect_to)

def loi_nhap_lieu(request, e, redirect_to):
	return tra_loi(request, ' '.join(e.messages), redirect_to, success=False, level=messages.WARNING, status=400)

def loi_luu_tru(request, e, redirect_to):
	logger.exception('Lỗi lưu trữ: %s', e)
	return tra_loi(request, str(e), redirect_to, success=False, level=messages.ERROR, status=500)

def tu_choi(request):
	if is_ajax(request):
		return JsonResponse({
			'success': False,
			'redirect_url': reverse('permission_denied'),
			'message': 'Bạn không có quyền truy cập chức năng này!'
		}, status=403)
	return redirect('permission_denied')

def lay_bang(request):
	return TallyStore(SessionStorage(request.session), getattr(settings, 'TALLY_STORAGE_KEY', STORAGE_KEY))

def doc_delta(request):
	try:
		delta = int(request.POST.get('delta', ''))
	except ValueError:
		raise ValidationError('Số phiếu điều chỉnh không hợp lệ')
	if abs(delta) > GIOI_HAN_DELTA:
		raise ValidationError(f'Mỗi lần chỉ điều chỉnh tối đa {GIOI_HAN_DELTA} phiếu')
	return delta

def permission_denied(request):
	return render(request, 'quan_ly_phieu_bau/permission_denied.html')

# View đăng nhập
def login_view(request):
	error = False
	if request.method == 'POST':
		username = request.POST.get('username')
		password = request.POST.get('password')
		user = authenticate(request, username=username, password=password)
		if user is not None:
			login(request, user)
			next_url = request.GET.get('next')
			if next_url and url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
				return redirect(next_url)
			return redirect('home')
		else:
			error = True
	return render(request, 'quan_ly_phieu_bau/login.html', {'form': {'errors': error}})

# View đăng xuất
def logout_view(request):
	logout(request)
	return redirect('login')

# ---- Bảng phiếu cục bộ (lưu trong session) ----

@login_required
def home(request):
	bang = lay_bang(request)
	return render(request, 'quan_ly_phieu_bau/home.html', {'thong_ke': tinh_thong_ke(bang.records)})

@login_required
@require_POST
def luu_ten(request):
	bang = lay_bang(request)
	try:
		record, created = bang.add(request.POST.get('name'))
	except ValidationError as e:
		return loi_nhap_lieu(request, e, 'home')
	if created:
		message = f"Thêm {record['name']} với 1 phiếu"
	else:
		message = f"Cập nhật {record['name']}: +1 phiếu"
	# Ô nhập được xoá sau khi lưu
	return tra_loi(request, message, 'home', record=record, value='', thong_ke=tinh_thong_ke(bang.records))

@login_required
@require_POST
def dieu_chinh(request):
	bang = lay_bang(request)
	name = request.POST.get('name', '')
	try:
		delta = doc_delta(request)
	except ValidationError as e:
		return loi_nhap_lieu(request, e, 'home')
	record = bang.adjust(name, delta)
	if record is None:
		# Không tìm thấy thì bỏ qua, không báo lỗi
		return redirect('home') if not is_ajax(request) else JsonResponse({'success': True, 'record': None})
	return tra_loi(request, f'{name}: {delta:+d} phiếu', 'home', record=record, thong_ke=tinh_thong_ke(bang.records))

@login_required
@require_POST
def xoa_ten(request):
	bang = lay_bang(request)
	name = request.POST.get('name', '')
	if not bang.remove(name):
		return redirect('home') if not is_ajax(request) else JsonResponse({'success': True})
	return tra_loi(request, f'{name} đã bị xóa', 'home', level=messages.INFO, thong_ke=tinh_thong_ke(bang.records))

@login_required
@require_POST
def reset(request):
	bang = lay_bang(request)
	try:
		bang.reset_all(confirmed=request.POST.get('confirm') == '1')
	except ValidationError as e:
		return loi_nhap_lieu(request, e, 'home')
	return tra_loi(request, 'Đã xóa toàn bộ dữ liệu', 'home')

@login_required
@require_GET
def goi_y(request):
	bang = lay_bang(request)
	return JsonResponse({'options': [{'value': name} for name in bang.suggest(request.GET.get('q', ''))]})

# ---- Nhập phiếu theo lần nhập (lưu trong cơ sở dữ liệu) ----

def lay_nguoi_nhap(request):
	user_id = request.session.get(NGUOI_NHAP_KEY)
	if user_id is None:
		return None
	return Account.objects.filter(pk=user_id, is_active=True).first()

def lay_tong_hop():
	"""
	Đọc tổng hợp mới nhất; nếu CSDL lỗi thì dùng bản gần nhất trong cache.
	"""
	try:
		records, max_lan = lan_nhap.refresh_aggregate()
	except PersistenceError:
		logger.exception('Không làm mới được bảng tổng hợp, dùng dữ liệu cũ')
		return cache.get(TONG_HOP_CACHE_KEY, ([], None))
	cache.set(TONG_HOP_CACHE_KEY, (records, max_lan), None)
	return records, max_lan

@login_required
def nhap_phieu(request):
	records, max_lan = lay_tong_hop()
	try:
		roster = lan_nhap.lay_danh_sach_ung_vien()
	except PersistenceError as e:
		logger.exception('Không đọc được danh sách ứng cử viên')
		messages.error(request, str(e))
		roster = []
	excluded = request.session.get(LOAI_TRU_KEY, [])
	return render(request, 'quan_ly_phieu_bau/nhap_phieu.html', {
		'roster': [{'name': name, 'excluded': name in excluded} for name in roster],
		'nguoi_nhap_list': Account.objects.filter(is_active=True).order_by('username'),
		'nguoi_nhap': lay_nguoi_nhap(request),
		'thong_ke': tinh_thong_ke(records),
		'max_lan_nhap': max_lan,
	})

@login_required
@require_POST
def chon_nguoi_nhap(request):
	user_id = request.POST.get('user_id')
	if not user_id:
		request.session.pop(NGUOI_NHAP_KEY, None)
		return tra_loi(request, 'Đã bỏ chọn người nhập', 'nhap_phieu', level=messages.INFO)
	user = Account.objects.filter(pk=user_id, is_active=True).first() if user_id.isdigit() else None
	if user is None:
		return tra_loi(request, 'Không tìm thấy người nhập', 'nhap_phieu', success=False, level=messages.WARNING, status=400)
	request.session[NGUOI_NHAP_KEY] = user.pk
	return tra_loi(request, f'Người nhập: {user.display_name}', 'nhap_phieu', user_id=user.pk)

@login_required
@require_POST
def chon_loai_tru(request):
	name = request.POST.get('name', '')
	excluded = list(request.session.get(LOAI_TRU_KEY, []))
	if name in excluded:
		excluded.remove(name)
	elif name:
		try:
			roster = lan_nhap.lay_danh_sach_ung_vien()
		except PersistenceError as e:
			return loi_luu_tru(request, e, 'nhap_phieu')
		# Chỉ loại trừ tên có trong danh sách ứng cử viên
		if name in roster:
			excluded.append(name)
	request.session[LOAI_TRU_KEY] = excluded
	if is_ajax(request):
		return JsonResponse({'success': True, 'excluded': excluded})
	return redirect('nhap_phieu')

@login_required
@require_POST
def luu_lan_nhap(request):
	try:
		lan = lan_nhap.save_selection(request.session.get(LOAI_TRU_KEY, []), lay_nguoi_nhap(request))
	except ValidationError as e:
		return loi_nhap_lieu(request, e, 'nhap_phieu')
	except PersistenceError as e:
		return loi_luu_tru(request, e, 'nhap_phieu')
	request.session[LOAI_TRU_KEY] = []
	return tra_loi(request, f'Đã lưu lần nhập {lan}', 'nhap_phieu', lan_nhap=lan)

@login_required
@require_POST
def dieu_chinh_tong_hop(request):
	name = request.POST.get('name', '')
	try:
		entry = lan_nhap.adjust_vote(name, doc_delta(request), lay_nguoi_nhap(request))
	except ValidationError as e:
		return loi_nhap_lieu(request, e, 'nhap_phieu')
	except PersistenceError as e:
		return loi_luu_tru(request, e, 'nhap_phieu')
	if entry is None:
		return redirect('nhap_phieu') if not is_ajax(request) else JsonResponse({'success': True, 'entry': None})
	return tra_loi(request, f'{name}: {entry.vote_delta} phiếu (lần {entry.lan_nhap})', 'nhap_phieu', entry={
		'candidate_name': entry.candidate_name,
		'vote_delta': entry.vote_delta,
		'lan_nhap': entry.lan_nhap,
	})

@login_required
@require_POST
def xoa_ung_vien(request):
	# Chỉ cho phép assistant hoặc admin, vì xoá phiếu của tất cả người nhập
	if not (request.user.role == 'assistant' or request.user.role == 'admin'):
		return tu_choi(request)
	name = request.POST.get('name', '')
	try:
		deleted = lan_nhap.delete_candidate_globally(name)
	except PersistenceError as e:
		return loi_luu_tru(request, e, 'nhap_phieu')
	return tra_loi(request, f'{name} đã bị xóa ({deleted} dòng)', 'nhap_phieu', level=messages.INFO, deleted=deleted)

@login_required
@require_POST
def hoan_tac(request):
	try:
		lan = lan_nhap.undo_last_batch(lay_nguoi_nhap(request), confirmed=request.POST.get('confirm') == '1')
	except ValidationError as e:
		return loi_nhap_lieu(request, e, 'nhap_phieu')
	except PersistenceError as e:
		return loi_luu_tru(request, e, 'nhap_phieu')
	return tra_loi(request, f'Đã hoàn tác lần nhập {lan}', 'nhap_phieu', lan_nhap=lan)

@login_required
@require_GET
def tong_hop(request):
	records, max_lan = lay_tong_hop()
	return JsonResponse({'success': True, 'thong_ke': tinh_thong_ke(records), 'max_lan_nhap': max_lan})
