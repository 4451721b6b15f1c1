# Bảng phiếu cục bộ: danh sách {name, votes} đọc khi khởi tạo, ghi lại sau mỗi thay đổi
import logging

from django.core.exceptions import ValidationError

from .storage import doc_danh_sach, ghi_danh_sach

logger = logging.getLogger(__name__)

STORAGE_KEY = 'voters_list_v1'
SUGGEST_LIMIT = 10


class TallyStore:
	"""
	Danh sách phiếu của một phiên làm việc.

	storage là bất kỳ đối tượng nào có get(key) và set(key, value).
	Lỗi khi ghi chỉ được ghi log, thay đổi trong bộ nhớ vẫn giữ nguyên.
	"""

	def __init__(self, storage, key=STORAGE_KEY):
		self.storage = storage
		self.key = key
		try:
			raw = storage.get(key)
		except Exception:
			logger.exception('Không đọc được danh sách phiếu từ nơi lưu trữ')
			raw = None
		self.records = doc_danh_sach(raw)

	def _tim(self, name):
		for record in self.records:
			if record['name'] == name:
				return record
		return None

	def _luu(self):
		try:
			self.storage.set(self.key, ghi_danh_sach(self.records))
		except Exception:
			logger.exception('Không lưu được danh sách phiếu')

	def add(self, name):
		"""
		Thêm tên mới với 1 phiếu, hoặc +1 nếu tên đã có (không phân biệt hoa thường).
		Trả về (record, created).
		"""
		name = (name or '').strip()
		if not name:
			raise ValidationError('Vui lòng nhập tên')
		lowered = name.lower()
		for record in self.records:
			if record['name'].lower() == lowered:
				record['votes'] += 1
				self._luu()
				return record, False
		record = {'name': name, 'votes': 1}
		self.records.append(record)
		self._luu()
		return record, True

	def adjust(self, name, delta):
		record = self._tim(name)
		if record is None:
			return None
		record['votes'] = max(0, record['votes'] + delta)
		self._luu()
		return record

	def remove(self, name):
		record = self._tim(name)
		if record is None:
			return False
		self.records.remove(record)
		self._luu()
		return True

	def reset_all(self, confirmed=False):
		if not confirmed:
			raise ValidationError('Cần xác nhận trước khi xoá toàn bộ dữ liệu')
		self.records = []
		self._luu()

	def suggest(self, query, limit=SUGGEST_LIMIT):
		# Gợi ý tên cho ô nhập
		if not query:
			return []
		q = query.lower()
		return [r['name'] for r in self.records if q in r['name'].lower()][:limit]
