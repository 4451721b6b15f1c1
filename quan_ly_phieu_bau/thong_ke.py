# Các hàm thống kê thuần, gọi lại sau mỗi lần thay đổi danh sách phiếu


def so_phieu(record):
	return record.get('votes') or 0


def sap_xep(records):
	"""
	Sắp xếp giảm dần theo số phiếu. sorted() ổn định nên các bản ghi bằng
	phiếu giữ nguyên thứ tự thêm vào.
	"""
	return sorted(records, key=so_phieu, reverse=True)


def tinh_thong_ke(records):
	"""
	Trả về tổng số người, tổng số phiếu, người dẫn đầu (None nếu rỗng)
	và danh sách đã sắp xếp.
	"""
	sorted_view = sap_xep(records)
	return {
		'total_voters': len(records),
		'total_votes': sum(so_phieu(r) for r in records),
		'leader': sorted_view[0] if sorted_view else None,
		'sorted_view': sorted_view,
	}
