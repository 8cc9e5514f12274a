DEFAULT_TEMPLATE_NAME = "Modern Professional"
DEFAULT_TEMPLATE_DESCRIPTION = "A clean, professional invoice template suitable for most businesses"

DEFAULT_TEMPLATE_HTML = """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>Invoice {{ invoice_number }}</title>
    <style>
        {{ css }}
    </style>
</head>
<body>
    <div class="invoice-container">
        <div class="header">
            <div class="business-info">
                <h1>{{ business_name }}</h1>
                <p>{{ business_address }}</p>
                <p>{{ business_email }}</p>
            </div>
            <div class="invoice-info">
                <h2>INVOICE</h2>
                <p><strong>Invoice #:</strong> {{ invoice_number }}</p>
                <p><strong>Date:</strong> {{ issue_date }}</p>
                <p><strong>Due Date:</strong> {{ due_date }}</p>
            </div>
        </div>

        <div class="client-info">
            <h3>Bill To:</h3>
            <div>
                <strong>{{ client.name }}</strong><br>
                {% if client.company %}{{ client.company }}<br>{% endif %}
                {% if client.address.street %}{{ client.address.street }}<br>{% endif %}
                {% if client.address.city %}{{ client.address.city }}, {{ client.address.state }} {{ client.address.zip }}<br>{% endif %}
                {{ client.email }}
            </div>
        </div>

        <table class="items-table">
            <thead>
                <tr>
                    <th>Description</th>
                    <th>Quantity</th>
                    <th>Rate</th>
                    <th>Amount</th>
                </tr>
            </thead>
            <tbody>
                {% for item in items %}
                <tr>
                    <td>
                        <strong>{{ item.description }}</strong>
                        {% if item.details %}<br><small>{{ item.details }}</small>{% endif %}
                    </td>
                    <td>{{ item.quantity }}</td>
                    <td>{{ item.rate }}</td>
                    <td>{{ item.total }}</td>
                </tr>
                {% endfor %}
            </tbody>
        </table>

        <div class="totals">
            <div class="totals-row">
                <span>Subtotal:</span>
                <span>{{ subtotal }}</span>
            </div>
            {% if has_discount %}
            <div class="totals-row">
                <span>Discount:</span>
                <span>-{{ discount_amount }}</span>
            </div>
            {% endif %}
            <div class="totals-row">
                <span>Tax ({{ tax_rate }}%):</span>
                <span>{{ tax_amount }}</span>
            </div>
            <div class="totals-row total">
                <span><strong>Total:</strong></span>
                <span><strong>{{ total }}</strong></span>
            </div>
        </div>

        {% if notes %}
        <div class="notes">
            <h4>Notes:</h4>
            <p>{{ notes }}</p>
        </div>
        {% endif %}

        <div class="footer">
            <p>Thank you for your business!</p>
            <p>Payment Terms: {{ payment_terms }} days</p>
        </div>
    </div>
</body>
</html>
"""

DEFAULT_TEMPLATE_CSS = """
body {
    font-family: 'Helvetica Neue', Arial, sans-serif;
    line-height: 1.6;
    color: #333;
    max-width: 800px;
    margin: 0 auto;
    padding: 20px;
}

.invoice-container {
    background: white;
    padding: 40px;
    border-radius: 10px;
    box-shadow: 0 0 20px rgba(0,0,0,0.1);
}

.header {
    display: flex;
    justify-content: space-between;
    align-items: flex-start;
    margin-bottom: 40px;
    padding-bottom: 20px;
    border-bottom: 2px solid #eee;
}

.business-info h1 {
    color: #2c3e50;
    margin: 0 0 10px 0;
    font-size: 28px;
}

.invoice-info {
    text-align: right;
}

.invoice-info h2 {
    color: #3498db;
    margin: 0 0 15px 0;
    font-size: 36px;
    font-weight: 300;
}

.client-info {
    margin-bottom: 30px;
    padding: 20px;
    background: #f8f9fa;
    border-radius: 5px;
}

.client-info h3 {
    margin: 0 0 15px 0;
    color: #2c3e50;
}

.items-table {
    width: 100%;
    border-collapse: collapse;
    margin-bottom: 30px;
    background: white;
}

.items-table th {
    background: #3498db;
    color: white;
    padding: 15px;
    text-align: left;
    font-weight: 600;
}

.items-table td {
    padding: 15px;
    border-bottom: 1px solid #eee;
}

.totals {
    margin-left: auto;
    width: 300px;
    background: #f8f9fa;
    padding: 20px;
    border-radius: 5px;
}

.totals-row {
    display: flex;
    justify-content: space-between;
    margin-bottom: 10px;
    padding: 5px 0;
}

.totals-row.total {
    border-top: 2px solid #3498db;
    margin-top: 15px;
    padding-top: 15px;
    font-size: 18px;
}

.notes {
    margin: 30px 0;
    padding: 20px;
    background: #fff3cd;
    border-left: 4px solid #ffc107;
    border-radius: 5px;
}

.footer {
    text-align: center;
    margin-top: 40px;
    padding-top: 20px;
    border-top: 1px solid #eee;
    color: #666;
}

@media print {
    body { margin: 0; padding: 0; }
    .invoice-container { box-shadow: none; }
}
"""
