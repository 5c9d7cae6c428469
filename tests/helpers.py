PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<<>>\n%%EOF\n"


def register(client, email="asha@example.edu", role="faculty", name="Asha Raman", employee_id="EMP007"):
    response = client.post(
        "/api/auth/register",
        json={
            "name": name,
            "email": email,
            "password": "secret123",
            "employeeId": employee_id,
            "department": "CSE",
            "role": role,
        },
    )
    assert response.status_code == 201, response.text
    data = response.json()["data"]
    return {"Authorization": f"Bearer {data['token']['accessToken']}"}, data["user"]


def pdf_upload(name="proof.pdf", content=PDF_BYTES, content_type="application/pdf"):
    return (name, content, content_type)
