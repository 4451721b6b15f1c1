# Nhập phiếu theo lần nhập (lan_nhap) trên cơ sở dữ liệu, có hoàn tác theo người nhập
import logging

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.db.models import F, Max, Min, Sum
from django.db.models.functions import Greatest

from .exceptions import PersistenceError
from .models import Candidate, Entry

logger = logging.getLogger(__name__)


def lay_danh_sach_ung_vien():
	try:
		return list(Candidate.objects.order_by('candidate_id').values_list('name', flat=True))
	except DatabaseError as e:
		raise PersistenceError(f'Không đọc được danh sách ứng cử viên: {e}') from e


def lan_nhap_lon_nhat(user=None):
	"""
	Lần nhập lớn nhất hiện có (của một người nếu truyền user), None nếu chưa có.
	"""
	entries = Entry.objects.all()
	if user is not None:
		entries = entries.filter(user=user)
	return entries.order_by('-lan_nhap').values_list('lan_nhap', flat=True).first()


def lan_nhap_tiep_theo():
	return (lan_nhap_lon_nhat() or 0) + 1


def save_selection(excluded_names, user):
	"""
	Lưu 1 phiếu cho mỗi ứng cử viên không bị loại trừ, tất cả chung một lần nhập.
	Trả về số lần nhập vừa tạo.
	"""
	if user is None:
		raise ValidationError('Vui lòng chọn người nhập')
	roster = lay_danh_sach_ung_vien()
	excluded = set(excluded_names or [])
	remaining = [name for name in roster if name not in excluded]
	if not remaining:
		raise ValidationError('Không còn ứng cử viên nào để lưu')
	try:
		with transaction.atomic():
			lan = lan_nhap_tiep_theo()
			Entry.objects.bulk_create([
				Entry(user=user, candidate_name=name, vote_delta=1, lan_nhap=lan)
				for name in remaining
			])
	except (DatabaseError, OverflowError) as e:
		raise PersistenceError(f'Lưu lần nhập thất bại: {e}') from e
	logger.info('Người nhập %s lưu lần nhập %s với %d ứng cử viên', user.pk, lan, len(remaining))
	return lan


def adjust_vote(candidate_name, delta, user):
	"""
	Cộng/trừ phiếu của người nhập cho một ứng cử viên, không để âm.

	Bước tìm dòng rồi mới thêm dòng mới không nguyên tử: hai người cùng sửa
	một cặp (người nhập, ứng cử viên) có thể tạo hai dòng.
	"""
	if user is None:
		raise ValidationError('Vui lòng chọn người nhập')
	try:
		entry_id = (
			Entry.objects.filter(user=user, candidate_name=candidate_name)
			.order_by('-lan_nhap', '-entry_id')
			.values_list('entry_id', flat=True)
			.first()
		)
		if entry_id is not None:
			Entry.objects.filter(entry_id=entry_id).update(vote_delta=Greatest(F('vote_delta') + delta, 0))
			return Entry.objects.get(entry_id=entry_id)
		if delta <= 0:
			return None
		with transaction.atomic():
			return Entry.objects.create(
				user=user,
				candidate_name=candidate_name,
				vote_delta=delta,
				lan_nhap=lan_nhap_tiep_theo(),
			)
	except (DatabaseError, OverflowError) as e:
		# SQLite báo OverflowError khi số vượt quá INTEGER 64 bit
		raise PersistenceError(f'Cập nhật phiếu cho {candidate_name} thất bại: {e}') from e


def delete_candidate_globally(name):
	# Xoá mọi dòng của ứng cử viên, của tất cả người nhập và mọi lần nhập
	try:
		deleted, _ = Entry.objects.filter(candidate_name=name).delete()
	except DatabaseError as e:
		raise PersistenceError(f'Xoá {name} thất bại: {e}') from e
	logger.info('Đã xoá %d dòng của ứng cử viên %s', deleted, name)
	return deleted


def undo_last_batch(user, confirmed=False):
	"""
	Xoá lần nhập gần nhất của chính người nhập; dòng của người khác giữ nguyên.
	Trả về số lần nhập đã hoàn tác.
	"""
	if user is None:
		raise ValidationError('Vui lòng chọn người nhập')
	try:
		lan = lan_nhap_lon_nhat(user)
	except DatabaseError as e:
		raise PersistenceError(f'Không đọc được lần nhập: {e}') from e
	if lan is None:
		raise ValidationError('Không có gì để hoàn tác')
	if not confirmed:
		raise ValidationError(f'Cần xác nhận trước khi hoàn tác lần nhập {lan}')
	try:
		deleted, _ = Entry.objects.filter(user=user, lan_nhap=lan).delete()
	except DatabaseError as e:
		raise PersistenceError(f'Hoàn tác lần nhập {lan} thất bại: {e}') from e
	logger.info('Người nhập %s hoàn tác lần nhập %s (%d dòng)', user.pk, lan, deleted)
	return lan


def refresh_aggregate():
	"""
	Cộng dồn phiếu theo ứng cử viên từ mọi dòng, kèm lần nhập lớn nhất hiện tại.
	Danh sách giữ thứ tự ứng cử viên xuất hiện lần đầu.
	"""
	try:
		rows = (
			Entry.objects.values('candidate_name')
			.annotate(votes=Sum('vote_delta'), first_seen=Min('entry_id'))
			.order_by('first_seen')
		)
		records = [{'name': row['candidate_name'], 'votes': max(0, row['votes'] or 0)} for row in rows]
		max_lan = Entry.objects.aggregate(m=Max('lan_nhap'))['m']
	except DatabaseError as e:
		raise PersistenceError(f'Không tổng hợp được phiếu: {e}') from e
	return records, max_lan
