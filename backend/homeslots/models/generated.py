from sqlalchemy import Column, ForeignKey, Integer, Text, UniqueConstraint, text

from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class Categories(Base):
    __tablename__ = 'categories'

    name = Column(Text, nullable=False)
    slug = Column(Text, nullable=False, unique=True)
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)

    sub_categories = relationship('SubCategories', back_populates='parent')
    time_slot_limit = relationship('TimeSlotCategoryLimits', back_populates='category', uselist=False)


class SubCategories(Base):
    __tablename__ = 'sub_categories'

    parent_id = Column(ForeignKey('categories.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)

    parent = relationship('Categories', back_populates='sub_categories')
    services = relationship('Services', back_populates='sub_category')


class Services(Base):
    __tablename__ = 'services'

    sub_category_id = Column(ForeignKey('sub_categories.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    duration_min = Column(Integer, nullable=False, server_default=text('0'))
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)
    description = Column(Text)

    sub_category = relationship('SubCategories', back_populates='services')
    booking_items = relationship('BookingItems', back_populates='service')


class Bookings(Base):
    __tablename__ = 'bookings'

    scheduled_date = Column(Text, nullable=False, index=True)  # YYYY-MM-DD
    scheduled_time_slot = Column(Text, nullable=False)  # HH:MM
    status = Column(Text, nullable=False, server_default=text("'pending'"))
    created_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    id = Column(Integer, primary_key=True)
    client_id = Column(Text)  # external identity, owned by the auth provider
    notes = Column(Text)

    items = relationship(
        'BookingItems',
        back_populates='booking',
        cascade='all, delete-orphan',
        order_by='BookingItems.id',
    )


class BookingItems(Base):
    __tablename__ = 'booking_items'

    booking_id = Column(ForeignKey('bookings.id', ondelete='CASCADE'), nullable=False)
    service_id = Column(ForeignKey('services.id'), nullable=False)
    quantity = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)

    booking = relationship('Bookings', back_populates='items')
    service = relationship('Services', back_populates='booking_items')


class SchedulingSettings(Base):
    """Single-row table (id = 1) holding the slot policy."""
    __tablename__ = 'scheduling_settings'

    slot_interval_minutes = Column(Integer, nullable=False, server_default=text('60'))
    break_minutes = Column(Integer, nullable=False, server_default=text('15'))
    lead_time_enabled = Column(Integer, nullable=False, server_default=text('0'))
    lead_time_hours = Column(Integer, nullable=False, server_default=text('4'))
    max_days_to_scan = Column(Integer, nullable=False, server_default=text('30'))
    updated_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    id = Column(Integer, primary_key=True)


class WeeklyAvailability(Base):
    __tablename__ = 'weekly_availability'
    __table_args__ = (
        UniqueConstraint('weekday'),
    )

    weekday = Column(Integer, nullable=False)  # 0 = Monday, 6 = Sunday
    is_enabled = Column(Integer, nullable=False, server_default=text('1'))
    start_time = Column(Text, nullable=False)
    end_time = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)


class TimeSlotCategoryLimits(Base):
    __tablename__ = 'time_slot_category_limits'

    category_id = Column(ForeignKey('categories.id', ondelete='CASCADE'), primary_key=True)
    max_concurrent_bookings = Column(Integer, nullable=False, server_default=text('1'))
    updated_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))

    category = relationship('Categories', back_populates='time_slot_limit')
