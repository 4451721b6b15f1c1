# Nơi lưu danh sách phiếu cho bản cục bộ (tương đương localStorage của trình duyệt)
import json
import logging

logger = logging.getLogger(__name__)


class SessionStorage:
	"""
	Bọc request.session thành giao diện get/set theo khoá.
	"""

	def __init__(self, session):
		self.session = session

	def get(self, key):
		return self.session.get(key)

	def set(self, key, value):
		self.session[key] = value


class MemoryStorage:
	"""
	Lưu trong dict, dùng cho script và kiểm thử.
	"""

	def __init__(self, data=None):
		self.data = dict(data or {})

	def get(self, key):
		return self.data.get(key)

	def set(self, key, value):
		self.data[key] = value


def doc_danh_sach(raw):
	"""
	Giải mã chuỗi JSON thành danh sách bản ghi {name, votes}.
	Giá trị rỗng, hỏng hoặc không phải mảng được coi là danh sách rỗng.
	"""
	if not raw or raw in ('null', 'undefined'):
		return []
	try:
		parsed = json.loads(raw)
	except (TypeError, ValueError):
		logger.error('Không đọc được danh sách phiếu đã lưu: %r', raw[:80] if isinstance(raw, str) else raw)
		return []
	if not isinstance(parsed, list):
		return []
	records = []
	for item in parsed:
		# Bỏ qua phần tử không hợp lệ
		if not isinstance(item, dict) or not isinstance(item.get('name'), str):
			continue
		votes = item.get('votes')
		if isinstance(votes, float) and votes.is_integer():
			votes = int(votes)
		elif not isinstance(votes, int) or isinstance(votes, bool):
			votes = 0
		records.append({'name': item['name'], 'votes': max(0, votes)})
	return records


def ghi_danh_sach(records):
	return json.dumps([{'name': r['name'], 'votes': r['votes']} for r in records], ensure_ascii=False)
